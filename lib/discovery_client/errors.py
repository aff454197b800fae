from __future__ import annotations

from typing import Mapping


class DiscoveryClientError(Exception):
    """Base client error."""


class ConfigError(DiscoveryClientError, ValueError):
    """Client or authenticator configuration is missing or invalid."""


class MissingArgumentError(DiscoveryClientError, ValueError):
    def __init__(self, name: str):
        super().__init__(f"{name} must be provided")
        self.name = name


class NetworkError(DiscoveryClientError):
    """Transport/network layer error."""


class ApiError(DiscoveryClientError):
    def __init__(
            self,
            status_code: int,
            message: str,
            details: str | None = None,
            headers: Mapping[str, str] | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.details = details
        self.headers = dict(headers or {})


class AuthError(ApiError):
    """Auth-related API error."""
