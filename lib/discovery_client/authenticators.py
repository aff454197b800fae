from __future__ import annotations

import base64
import logging
import os
import time
from pathlib import Path
from typing import Any, MutableMapping

import httpx
from dotenv import dotenv_values

from .errors import AuthError, ConfigError, NetworkError

logger = logging.getLogger(__name__)

AUTH_TYPE_NOAUTH = "noauth"
AUTH_TYPE_BEARER = "bearertoken"
AUTH_TYPE_BASIC = "basic"
AUTH_TYPE_IAM = "iam"

DEFAULT_IAM_URL = "https://iam.cloud.ibm.com"
CREDENTIALS_FILENAME = "ibm-credentials.env"
ENV_CREDENTIALS_FILE = "IBM_CREDENTIALS_FILE"


class Authenticator:
    auth_type = ""

    def authenticate(self, headers: MutableMapping[str, str]) -> None:
        raise NotImplementedError

    def validate(self) -> None:
        return None


class NoAuthAuthenticator(Authenticator):
    auth_type = AUTH_TYPE_NOAUTH

    def authenticate(self, headers: MutableMapping[str, str]) -> None:
        return None


class BearerTokenAuthenticator(Authenticator):
    auth_type = AUTH_TYPE_BEARER

    def __init__(self, bearer_token: str):
        self.bearer_token = bearer_token
        self.validate()

    def validate(self) -> None:
        if not (self.bearer_token or "").strip():
            raise ConfigError("bearer_token must be provided")

    def authenticate(self, headers: MutableMapping[str, str]) -> None:
        headers["Authorization"] = f"Bearer {self.bearer_token}"


class BasicAuthenticator(Authenticator):
    auth_type = AUTH_TYPE_BASIC

    def __init__(self, username: str, password: str):
        self.username = username
        self.password = password
        self.validate()

    def validate(self) -> None:
        if not self.username or not self.password:
            raise ConfigError("username and password must be provided")
        if _has_bad_chars(self.username) or _has_bad_chars(self.password):
            raise ConfigError("username and password must not start or end with braces or quotes")

    def authenticate(self, headers: MutableMapping[str, str]) -> None:
        raw = f"{self.username}:{self.password}".encode("utf-8")
        headers["Authorization"] = "Basic " + base64.b64encode(raw).decode("ascii")


class IamAuthenticator(Authenticator):
    """Exchanges an API key for an IAM access token and caches it until shortly before expiry."""

    auth_type = AUTH_TYPE_IAM
    grant_type = "urn:ibm:params:oauth:grant-type:apikey"

    def __init__(
            self,
            apikey: str,
            *,
            url: str | None = None,
            refresh_margin_s: int = 60,
            timeout_s: float = 15.0,
            transport: httpx.BaseTransport | None = None,
    ):
        self.apikey = apikey
        self.url = (url or DEFAULT_IAM_URL).rstrip("/")
        self.refresh_margin_s = refresh_margin_s
        self.timeout_s = timeout_s
        self._transport = transport
        self._access_token: str | None = None
        self._expires_at = 0.0
        self.validate()

    def validate(self) -> None:
        if not (self.apikey or "").strip():
            raise ConfigError("apikey must be provided")
        if _has_bad_chars(self.apikey):
            raise ConfigError("apikey must not start or end with braces or quotes")

    def authenticate(self, headers: MutableMapping[str, str]) -> None:
        headers["Authorization"] = f"Bearer {self.token()}"

    def token(self) -> str:
        if self._access_token is None or time.time() >= self._expires_at - self.refresh_margin_s:
            self._request_token()
        return self._access_token or ""

    def _request_token(self) -> None:
        logger.debug("requesting IAM access token from %s", self.url)
        try:
            with httpx.Client(timeout=self.timeout_s, transport=self._transport) as client:
                r = client.post(
                    f"{self.url}/identity/token",
                    data={
                        "grant_type": self.grant_type,
                        "apikey": self.apikey,
                        "response_type": "cloud_iam",
                    },
                    headers={"Accept": "application/json"},
                )
        except httpx.RequestError as e:
            raise NetworkError(str(e)) from e

        if r.status_code >= 400:
            raise AuthError(r.status_code, f"IAM token request failed with {r.status_code}", r.text[:1000])

        try:
            data = r.json()
        except ValueError as e:
            raise AuthError(r.status_code, "IAM token response was not JSON", r.text[:1000]) from e
        token = data.get("access_token") if isinstance(data, dict) else None
        if not isinstance(token, str) or not token:
            raise AuthError(r.status_code, "IAM token response contained no access_token", r.text[:1000])

        now = time.time()
        expiration = data.get("expiration")
        if isinstance(expiration, (int, float)):
            self._expires_at = float(expiration)
        else:
            self._expires_at = now + float(data.get("expires_in") or 3600)
        self._access_token = token


def _has_bad_chars(value: str) -> bool:
    value = value or ""
    return value[:1] in ("{", '"') or value[-1:] in ("}", '"')


def _credentials_file_candidates() -> list[Path]:
    explicit = os.getenv(ENV_CREDENTIALS_FILE, "").strip()
    if explicit:
        return [Path(explicit)]
    return [Path.cwd() / CREDENTIALS_FILENAME, Path.home() / CREDENTIALS_FILENAME]


def _service_prefix(service_name: str) -> str:
    return service_name.upper().replace("-", "_") + "_"


def read_external_sources(service_name: str) -> dict[str, str]:
    """Properties for ``service_name`` from the first credentials file found, overridden by the environment.

    Keys are returned without the service prefix: ``DISCOVERY_APIKEY`` becomes ``APIKEY``.
    """
    prefix = _service_prefix(service_name)
    props: dict[str, str] = {}
    for path in _credentials_file_candidates():
        if not path.is_file():
            continue
        values = dotenv_values(path)
        props = {k[len(prefix):]: v for k, v in values.items() if k.startswith(prefix) and v}
        if props:
            logger.debug("loaded %s credentials from %s", service_name, path)
            break

    props.update({k[len(prefix):]: v for k, v in os.environ.items() if k.startswith(prefix) and v})
    return props


def authenticator_from_properties(props: dict[str, Any]) -> Authenticator | None:
    if not props:
        return None
    auth_type = str(props.get("AUTH_TYPE") or "").strip().lower()
    if not auth_type:
        if props.get("APIKEY"):
            auth_type = AUTH_TYPE_IAM
        elif props.get("BEARER_TOKEN"):
            auth_type = AUTH_TYPE_BEARER
        elif props.get("USERNAME") or props.get("PASSWORD"):
            auth_type = AUTH_TYPE_BASIC
        else:
            return None

    if auth_type == AUTH_TYPE_NOAUTH:
        return NoAuthAuthenticator()
    if auth_type == AUTH_TYPE_BEARER:
        return BearerTokenAuthenticator(str(props.get("BEARER_TOKEN") or ""))
    if auth_type == AUTH_TYPE_BASIC:
        return BasicAuthenticator(str(props.get("USERNAME") or ""), str(props.get("PASSWORD") or ""))
    if auth_type == AUTH_TYPE_IAM:
        return IamAuthenticator(
            str(props.get("APIKEY") or ""),
            url=str(props.get("AUTH_URL") or "") or None,
        )
    raise ConfigError(f"Unsupported auth type: {auth_type}")


def get_authenticator_from_environment(service_name: str) -> Authenticator | None:
    return authenticator_from_properties(read_external_sources(service_name))
