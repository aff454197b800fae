from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class DetailedResponse:
    """Status, headers and parsed body of a completed call."""

    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    result: Any = None

    def get_result(self) -> Any:
        return self.result

    def get_headers(self) -> dict[str, str]:
        return self.headers

    def get_status_code(self) -> int:
        return self.status_code
