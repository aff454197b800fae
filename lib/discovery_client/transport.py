from __future__ import annotations

import json
import logging
from typing import Any, Mapping

import httpx

from .authenticators import Authenticator
from .errors import ApiError, AuthError, NetworkError
from .response import DetailedResponse

logger = logging.getLogger(__name__)


class Transport:
    def __init__(
            self,
            base_url: str,
            authenticator: Authenticator,
            *,
            timeout_s: float = 15.0,
            verify: bool = True,
            default_headers: Mapping[str, str] | None = None,
            transport: httpx.BaseTransport | None = None,
    ):
        self._authenticator = authenticator
        self._default_headers = dict(default_headers or {})
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout_s,
            verify=verify,
            follow_redirects=True,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def request(
            self,
            method: str,
            path: str,
            *,
            headers: Mapping[str, Any] | None = None,
            params: Mapping[str, Any] | None = None,
            json_body: Any | None = None,
            files: list[tuple[str, tuple]] | None = None,
            accept_json: bool = True,
    ) -> DetailedResponse:
        request_headers = httpx.Headers(self._default_headers)
        request_headers.update(_prune_none(headers or {}))
        if accept_json:
            request_headers.setdefault("Accept", "application/json")
        self._authenticator.authenticate(request_headers)

        try:
            r = self._client.request(
                method,
                path,
                headers=request_headers,
                params=_prune_none(params or {}),
                json=_prune_none(json_body) if json_body is not None else None,
                files=files or None,
            )
        except httpx.RequestError as e:
            raise NetworkError(str(e)) from e

        logger.debug("%s %s -> %s", method, path, r.status_code)

        # Try parse body as json for better errors / output
        data: Any = None
        text = r.text
        if text:
            try:
                data = r.json()
            except ValueError:
                data = None

        if r.status_code >= 400:
            msg = _error_message(data) or f"{method} {path} failed with {r.status_code}"
            details = json.dumps(data, ensure_ascii=False) if data is not None else (text[:1000] or None)
            if r.status_code in (401, 403):
                raise AuthError(r.status_code, msg, details, r.headers)
            raise ApiError(r.status_code, msg, details, r.headers)

        return DetailedResponse(
            status_code=r.status_code,
            headers=dict(r.headers),
            result=data if data is not None else (text or None),
        )


def _prune_none(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: v for k, v in value.items() if v is not None}
    return value


def _error_message(data: Any) -> str | None:
    if not isinstance(data, dict):
        return None
    for key in ("error", "message", "errorMessage"):
        value = data.get(key)
        if isinstance(value, str) and value:
            return value
    errors = data.get("errors")
    if isinstance(errors, list) and errors and isinstance(errors[0], dict):
        value = errors[0].get("message")
        if isinstance(value, str) and value:
            return value
    return None
