from __future__ import annotations

import json
import os
from typing import Any, BinaryIO, Mapping, Sequence
from urllib.parse import quote

import httpx

from .authenticators import get_authenticator_from_environment, read_external_sources
from .common import get_sdk_headers
from .config_types import ClientConfig
from .errors import ConfigError, MissingArgumentError
from .models import (
    QueryLargePassages,
    QueryLargeSuggestedRefinements,
    QueryLargeTableResults,
    TrainingExample,
    to_wire,
)
from .response import DetailedResponse
from .transport import Transport

SERVICE_NAME = "discovery"
SERVICE_VERSION = "V2"
DEFAULT_SERVICE_URL = "https://api.us-south.discovery.watson.cloud.ibm.com"
DEFAULT_FILE_CONTENT_TYPE = "application/octet-stream"
FORCE_HEADER = "X-Watson-Discovery-Force"

Headers = Mapping[str, str] | None


def _require(**values: Any) -> None:
    for name, value in values.items():
        if value is None:
            raise MissingArgumentError(name)


def _segment(value: Any) -> str:
    encoded = quote(str(value), safe="")
    # "." and ".." would be collapsed as dot segments when the URL is built
    if encoded in (".", ".."):
        return encoded.replace(".", "%2E")
    return encoded


def _join(values: Sequence[str] | str | None) -> str | None:
    if values is None or isinstance(values, str):
        return values
    return ",".join(str(v) for v in values)


def _flag(value: bool | None) -> str | None:
    if value is None:
        return None
    return "true" if value else "false"


def _file_part(file: Any, filename: str | None, content_type: str | None) -> tuple[str, tuple]:
    if isinstance(file, (bytes, bytearray)):
        content = bytes(file)
    elif hasattr(file, "read"):
        content = file.read()
        if isinstance(content, str):
            content = content.encode("utf-8")
        if filename is None:
            name = getattr(file, "name", None)
            if isinstance(name, str) and name:
                filename = os.path.basename(name)
    else:
        content = json.dumps(to_wire(file)).encode("utf-8")
    content_type = getattr(content_type, "value", content_type) or DEFAULT_FILE_CONTENT_TYPE
    return "file", (filename, content, content_type)


def _metadata_part(metadata: Any) -> tuple[str, tuple]:
    text = metadata if isinstance(metadata, str) else json.dumps(metadata)
    return "metadata", (None, text.encode("utf-8"), "text/plain")


class DiscoveryClient:
    """Client for the Discovery v2 API.

    Every method validates its required arguments before any I/O, sends the
    configured ``version`` as a query parameter and returns the
    :class:`DetailedResponse` unchanged.
    """

    def __init__(self, cfg: ClientConfig, *, transport: httpx.BaseTransport | None = None):
        if not cfg.version:
            raise ConfigError("version must be provided")
        self._cfg = cfg

        external = read_external_sources(SERVICE_NAME)
        authenticator = cfg.authenticator or get_authenticator_from_environment(SERVICE_NAME)
        if authenticator is None:
            raise ConfigError("authenticator must be provided")
        authenticator.validate()

        service_url = cfg.service_url or external.get("URL") or DEFAULT_SERVICE_URL
        disable_ssl = cfg.disable_ssl_verification or str(external.get("DISABLE_SSL", "")).lower() == "true"
        self.service_url = service_url.rstrip("/")
        self.authenticator = authenticator
        self._t = Transport(
            self.service_url,
            authenticator,
            timeout_s=cfg.timeout_s,
            verify=not disable_ssl,
            default_headers=cfg.default_headers,
            transport=transport,
        )

    @property
    def version(self) -> str:
        return self._cfg.version

    def close(self) -> None:
        self._t.close()

    def __enter__(self) -> DiscoveryClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(
            self,
            operation: str,
            method: str,
            path: str,
            *,
            headers: Headers = None,
            extra_headers: Mapping[str, str | None] | None = None,
            params: Mapping[str, Any] | None = None,
            json_body: Mapping[str, Any] | None = None,
            files: list[tuple[str, tuple]] | None = None,
            accept_json: bool = True,
    ) -> DetailedResponse:
        request_headers = httpx.Headers({k: v for k, v in (extra_headers or {}).items() if v is not None})
        request_headers.update(get_sdk_headers(SERVICE_NAME, SERVICE_VERSION, operation))
        request_headers.update({k: v for k, v in (headers or {}).items() if v is not None})
        request_params = {"version": self._cfg.version}
        request_params.update(params or {})
        return self._t.request(
            method,
            path,
            headers=request_headers,
            params=request_params,
            json_body=json_body,
            files=files,
            accept_json=accept_json,
        )

    # --- Collections ---
    def list_collections(self, project_id: str, *, headers: Headers = None) -> DetailedResponse:
        """List the collections of a project."""
        _require(project_id=project_id)
        path = f"/v2/projects/{_segment(project_id)}/collections"
        return self._request("list_collections", "GET", path, headers=headers)

    # --- Queries ---
    def query(
            self,
            project_id: str,
            *,
            collection_ids: Sequence[str] | None = None,
            filter: str | None = None,
            query: str | None = None,
            natural_language_query: str | None = None,
            aggregation: str | None = None,
            count: int | None = None,
            return_: Sequence[str] | None = None,
            offset: int | None = None,
            sort: str | None = None,
            highlight: bool | None = None,
            spelling_suggestions: bool | None = None,
            table_results: QueryLargeTableResults | dict | None = None,
            suggested_refinements: QueryLargeSuggestedRefinements | dict | None = None,
            passages: QueryLargePassages | dict | None = None,
            headers: Headers = None,
    ) -> DetailedResponse:
        """Query a project.

        ``filter``, ``query`` and ``aggregation`` use the Discovery query
        language; ``natural_language_query`` is matched using training data.
        ``collection_ids`` is sent as a JSON list here, unlike the GET
        endpoints where it is comma-joined.
        """
        _require(project_id=project_id)
        body = {
            "collection_ids": list(collection_ids) if collection_ids is not None else None,
            "filter": filter,
            "query": query,
            "natural_language_query": natural_language_query,
            "aggregation": aggregation,
            "count": count,
            "return": list(return_) if return_ is not None else None,
            "offset": offset,
            "sort": sort,
            "highlight": highlight,
            "spelling_suggestions": spelling_suggestions,
            "table_results": to_wire(table_results),
            "suggested_refinements": to_wire(suggested_refinements),
            "passages": to_wire(passages),
        }
        path = f"/v2/projects/{_segment(project_id)}/query"
        return self._request("query", "POST", path, headers=headers, json_body=body)

    def get_autocompletion(
            self,
            project_id: str,
            prefix: str,
            *,
            collection_ids: Sequence[str] | None = None,
            field: str | None = None,
            count: int | None = None,
            headers: Headers = None,
    ) -> DetailedResponse:
        """Completion suggestions for ``prefix``; all collections are used when ``collection_ids`` is unset."""
        _require(project_id=project_id, prefix=prefix)
        params = {
            "prefix": prefix,
            "collection_ids": _join(collection_ids),
            "field": field,
            "count": count,
        }
        path = f"/v2/projects/{_segment(project_id)}/autocompletion"
        return self._request("get_autocompletion", "GET", path, headers=headers, params=params)

    def query_notices(
            self,
            project_id: str,
            *,
            filter: str | None = None,
            query: str | None = None,
            natural_language_query: str | None = None,
            count: int | None = None,
            offset: int | None = None,
            headers: Headers = None,
    ) -> DetailedResponse:
        """Query the notices (ingestion and training warnings or errors) of a project."""
        _require(project_id=project_id)
        params = {
            "filter": filter,
            "query": query,
            "natural_language_query": natural_language_query,
            "count": count,
            "offset": offset,
        }
        path = f"/v2/projects/{_segment(project_id)}/notices"
        return self._request("query_notices", "GET", path, headers=headers, params=params)

    def list_fields(
            self,
            project_id: str,
            *,
            collection_ids: Sequence[str] | None = None,
            headers: Headers = None,
    ) -> DetailedResponse:
        _require(project_id=project_id)
        params = {"collection_ids": _join(collection_ids)}
        path = f"/v2/projects/{_segment(project_id)}/fields"
        return self._request("list_fields", "GET", path, headers=headers, params=params)

    # --- Component settings ---
    def get_component_settings(self, project_id: str, *, headers: Headers = None) -> DetailedResponse:
        _require(project_id=project_id)
        path = f"/v2/projects/{_segment(project_id)}/component_settings"
        return self._request("get_component_settings", "GET", path, headers=headers)

    # --- Documents ---
    def add_document(
            self,
            project_id: str,
            collection_id: str,
            *,
            file: bytes | BinaryIO | Any | None = None,
            filename: str | None = None,
            file_content_type: str | None = None,
            metadata: str | dict | None = None,
            x_watson_discovery_force: bool | None = None,
            headers: Headers = None,
    ) -> DetailedResponse:
        """Add a document to a collection.

        ``file`` may be bytes, an open file or any JSON-serializable value.
        When ``file_content_type`` is unset the service sniffs the type.
        ``metadata`` is sent as a separate text part and must stay under 1 MB.
        ``x_watson_discovery_force`` skips the check for collections sharing
        a data source.
        """
        _require(project_id=project_id, collection_id=collection_id)
        path = f"/v2/projects/{_segment(project_id)}/collections/{_segment(collection_id)}/documents"
        return self._request(
            "add_document",
            "POST",
            path,
            headers=headers,
            extra_headers={FORCE_HEADER: _flag(x_watson_discovery_force)},
            files=self._document_form(file, filename, file_content_type, metadata),
        )

    def update_document(
            self,
            project_id: str,
            collection_id: str,
            document_id: str,
            *,
            file: bytes | BinaryIO | Any | None = None,
            filename: str | None = None,
            file_content_type: str | None = None,
            metadata: str | dict | None = None,
            x_watson_discovery_force: bool | None = None,
            headers: Headers = None,
    ) -> DetailedResponse:
        """Replace an existing document; accepts the same payload options as :meth:`add_document`."""
        _require(project_id=project_id, collection_id=collection_id, document_id=document_id)
        path = (
            f"/v2/projects/{_segment(project_id)}/collections/{_segment(collection_id)}"
            f"/documents/{_segment(document_id)}"
        )
        return self._request(
            "update_document",
            "POST",
            path,
            headers=headers,
            extra_headers={FORCE_HEADER: _flag(x_watson_discovery_force)},
            files=self._document_form(file, filename, file_content_type, metadata),
        )

    def delete_document(
            self,
            project_id: str,
            collection_id: str,
            document_id: str,
            *,
            x_watson_discovery_force: bool | None = None,
            headers: Headers = None,
    ) -> DetailedResponse:
        """Delete a document. The service reports unknown document IDs as ``deleted`` too."""
        _require(project_id=project_id, collection_id=collection_id, document_id=document_id)
        path = (
            f"/v2/projects/{_segment(project_id)}/collections/{_segment(collection_id)}"
            f"/documents/{_segment(document_id)}"
        )
        return self._request(
            "delete_document",
            "DELETE",
            path,
            headers=headers,
            extra_headers={FORCE_HEADER: _flag(x_watson_discovery_force)},
        )

    @staticmethod
    def _document_form(
            file: Any,
            filename: str | None,
            file_content_type: str | None,
            metadata: Any,
    ) -> list[tuple[str, tuple]]:
        form: list[tuple[str, tuple]] = []
        if file is not None:
            form.append(_file_part(file, filename, file_content_type))
        if metadata is not None:
            form.append(_metadata_part(metadata))
        return form

    # --- Training data ---
    def list_training_queries(self, project_id: str, *, headers: Headers = None) -> DetailedResponse:
        _require(project_id=project_id)
        path = f"/v2/projects/{_segment(project_id)}/training_data/queries"
        return self._request("list_training_queries", "GET", path, headers=headers)

    def delete_training_queries(self, project_id: str, *, headers: Headers = None) -> None:
        """Remove all training queries of a project. Returns nothing; errors still raise."""
        _require(project_id=project_id)
        path = f"/v2/projects/{_segment(project_id)}/training_data/queries"
        self._request("delete_training_queries", "DELETE", path, headers=headers, accept_json=False)

    def create_training_query(
            self,
            project_id: str,
            natural_language_query: str,
            examples: Sequence[TrainingExample | dict],
            *,
            filter: str | None = None,
            headers: Headers = None,
    ) -> DetailedResponse:
        _require(project_id=project_id, natural_language_query=natural_language_query, examples=examples)
        body = {
            "natural_language_query": natural_language_query,
            "examples": to_wire(list(examples)),
            "filter": filter,
        }
        path = f"/v2/projects/{_segment(project_id)}/training_data/queries"
        return self._request("create_training_query", "POST", path, headers=headers, json_body=body)

    def get_training_query(self, project_id: str, query_id: str, *, headers: Headers = None) -> DetailedResponse:
        _require(project_id=project_id, query_id=query_id)
        path = f"/v2/projects/{_segment(project_id)}/training_data/queries/{_segment(query_id)}"
        return self._request("get_training_query", "GET", path, headers=headers)

    def update_training_query(
            self,
            project_id: str,
            query_id: str,
            natural_language_query: str,
            examples: Sequence[TrainingExample | dict],
            *,
            filter: str | None = None,
            headers: Headers = None,
    ) -> DetailedResponse:
        _require(
            project_id=project_id,
            query_id=query_id,
            natural_language_query=natural_language_query,
            examples=examples,
        )
        body = {
            "natural_language_query": natural_language_query,
            "examples": to_wire(list(examples)),
            "filter": filter,
        }
        path = f"/v2/projects/{_segment(project_id)}/training_data/queries/{_segment(query_id)}"
        return self._request("update_training_query", "POST", path, headers=headers, json_body=body)
