from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field, replace
from typing import Any

import tomli_w
from platformdirs import user_config_dir

from . import console

APP_NAME = "discovery"
CONFIG_FILENAME = "config.toml"
VERSION_DEFAULT = "2020-08-30"
ENV_VERSION = "DISCOVERY_VERSION"
ENV_PROJECT_ID = "DISCOVERY_PROJECT_ID"

_WARNED_SERVICE_URL_SCHEME = False


@dataclass
class AuthConfig:
    auth_type: str = ""
    apikey: str = ""
    bearer_token: str = ""
    username: str = ""
    password: str = ""
    iam_url: str = ""

    def is_empty(self) -> bool:
        return not (self.auth_type or self.apikey or self.bearer_token or self.username)


@dataclass
class AppConfig:
    version: str = VERSION_DEFAULT
    service_url: str = ""
    project_id: str = ""
    auth: AuthConfig = field(default_factory=AuthConfig)
    profiles: dict[str, dict[str, Any]] = field(default_factory=dict)


def config_path() -> str:
    return f"{user_config_dir(APP_NAME)}/{CONFIG_FILENAME}"


def default_config() -> AppConfig:
    return AppConfig()


def normalize_service_url(raw: str | None, *, warn: bool = False) -> str:
    value = (raw or "").strip()
    if not value:
        return ""
    value = value.rstrip("/")
    lowered = value.lower()
    if lowered.startswith("http://") or lowered.startswith("https://"):
        return value

    host = value.split("/", 1)[0]
    host = host.split(":", 1)[0].lower()
    if host in {"localhost", "127.0.0.1", "0.0.0.0"}:
        scheme = "http://"
    else:
        scheme = "https://"

    normalized = f"{scheme}{value}"
    if warn:
        _warn_missing_scheme(normalized)
    return normalized


def _warn_missing_scheme(normalized: str) -> None:
    global _WARNED_SERVICE_URL_SCHEME
    if _WARNED_SERVICE_URL_SCHEME:
        return
    console.warn(f"service_url missing scheme, assuming {normalized}")
    _WARNED_SERVICE_URL_SCHEME = True


def ensure_parent_dir(path: str) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)


def _auth_to_toml(auth: AuthConfig) -> dict[str, Any]:
    return {
        "auth_type": auth.auth_type or None,
        "apikey": auth.apikey or None,
        "bearer_token": auth.bearer_token or None,
        "username": auth.username or None,
        "password": auth.password or None,
        "iam_url": auth.iam_url or None,
    }


def to_toml(cfg: AppConfig) -> dict[str, Any]:
    return _prune_none(
        {
            "version": cfg.version,
            "service_url": cfg.service_url or None,
            "project_id": cfg.project_id or None,
            "auth": _auth_to_toml(cfg.auth),
            "profiles": cfg.profiles or None,
        }
    )


def _prune_none(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _prune_none(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_prune_none(item) for item in value if item is not None]
    return value


def _auth_from_toml(raw: Any, base: AuthConfig | None = None) -> AuthConfig:
    base = base or AuthConfig()
    if not isinstance(raw, dict):
        return base
    return AuthConfig(
        auth_type=str(raw.get("auth_type") or base.auth_type),
        apikey=str(raw.get("apikey") or base.apikey),
        bearer_token=str(raw.get("bearer_token") or base.bearer_token),
        username=str(raw.get("username") or base.username),
        password=str(raw.get("password") or base.password),
        iam_url=str(raw.get("iam_url") or base.iam_url),
    )


def from_toml(data: dict[str, Any]) -> AppConfig:
    profiles_raw = data.get("profiles") or {}
    profiles = {str(k): v for k, v in profiles_raw.items() if isinstance(v, dict)} if isinstance(profiles_raw, dict) else {}
    return AppConfig(
        version=str(data.get("version") or VERSION_DEFAULT).strip(),
        service_url=normalize_service_url(str(data.get("service_url") or ""), warn=True),
        project_id=str(data.get("project_id") or "").strip(),
        auth=_auth_from_toml(data.get("auth")),
        profiles=profiles,
    )


def load_config() -> AppConfig:
    path = config_path()
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
        return from_toml(data)
    except FileNotFoundError:
        return default_config()


def apply_profile(cfg: AppConfig, profile: str | None) -> AppConfig:
    if not profile:
        return cfg
    prof = cfg.profiles.get(profile)
    if not isinstance(prof, dict):
        console.warn(f"Profile not found: {profile}")
        return cfg

    return replace(
        cfg,
        version=str(prof.get("version") or cfg.version).strip(),
        service_url=normalize_service_url(str(prof.get("service_url") or cfg.service_url), warn=True),
        project_id=str(prof.get("project_id") or cfg.project_id).strip(),
        auth=_auth_from_toml(prof.get("auth"), cfg.auth),
    )


def resolve_version(cfg: AppConfig) -> str:
    env_value = os.getenv(ENV_VERSION, "").strip()
    if env_value:
        return env_value
    return (cfg.version or VERSION_DEFAULT).strip()


def resolve_project_id(cfg: AppConfig, override: str | None) -> str | None:
    if override:
        return override.strip()
    env_value = os.getenv(ENV_PROJECT_ID, "").strip()
    if env_value:
        return env_value
    return cfg.project_id or None


def save_config(cfg: AppConfig) -> str:
    path = config_path()
    ensure_parent_dir(path)
    with open(path, "wb") as f:
        f.write(tomli_w.dumps(to_toml(cfg)).encode("utf-8"))
    os.chmod(path, 0o600)
    return path
