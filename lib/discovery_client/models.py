from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any


class FileContentType(str, Enum):
    """Upload content types the service recognizes without sniffing."""

    APPLICATION_JSON = "application/json"
    APPLICATION_MSWORD = "application/msword"
    APPLICATION_DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    APPLICATION_PDF = "application/pdf"
    TEXT_HTML = "text/html"
    APPLICATION_XHTML_XML = "application/xhtml+xml"


class _Model:
    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass
class QueryLargePassages(_Model):
    enabled: bool | None = None
    per_document: bool | None = None
    max_per_document: int | None = None
    fields: list[str] | None = None
    count: int | None = None
    characters: int | None = None


@dataclass
class QueryLargeTableResults(_Model):
    enabled: bool | None = None
    count: int | None = None


@dataclass
class QueryLargeSuggestedRefinements(_Model):
    enabled: bool | None = None
    count: int | None = None


@dataclass
class TrainingExample(_Model):
    document_id: str
    collection_id: str
    relevance: int
    created: str | None = None
    updated: str | None = None


def to_wire(value: Any) -> Any:
    """Convert model objects (recursively through lists) to plain JSON values."""
    if isinstance(value, _Model):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [to_wire(v) for v in value]
    return value
