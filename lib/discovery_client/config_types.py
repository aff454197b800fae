from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from .authenticators import Authenticator


@dataclass(frozen=True)
class ClientConfig:
    version: str
    service_url: str | None = None
    authenticator: Authenticator | None = None
    timeout_s: float = 15.0
    disable_ssl_verification: bool = False
    default_headers: Mapping[str, str] = field(default_factory=dict)
