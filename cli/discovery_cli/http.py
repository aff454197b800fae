from __future__ import annotations

from discovery_client import ClientConfig, DiscoveryClient
from discovery_client.authenticators import Authenticator, authenticator_from_properties

from .config import AppConfig, AuthConfig, apply_profile, normalize_service_url, resolve_version


def build_authenticator(auth: AuthConfig) -> Authenticator | None:
    # empty [auth] -> let the client resolve DISCOVERY_* credentials itself
    if auth.is_empty():
        return None
    return authenticator_from_properties(
        {
            "AUTH_TYPE": auth.auth_type,
            "APIKEY": auth.apikey,
            "BEARER_TOKEN": auth.bearer_token,
            "USERNAME": auth.username,
            "PASSWORD": auth.password,
            "AUTH_URL": auth.iam_url,
        }
    )


def make_client(
    cfg: AppConfig,
    *,
    profile: str | None,
    service_url_override: str | None,
) -> DiscoveryClient:
    effective_cfg = apply_profile(cfg, profile)
    service_url = normalize_service_url(service_url_override or effective_cfg.service_url, warn=True)
    return DiscoveryClient(
        ClientConfig(
            version=resolve_version(effective_cfg),
            service_url=service_url or None,
            authenticator=build_authenticator(effective_cfg.auth),
        )
    )
