from __future__ import annotations

from typing import NoReturn

import typer
from discovery_client import ApiError, ConfigError, DiscoveryClient, MissingArgumentError, NetworkError

from .. import console
from ..config import AppConfig, apply_profile, load_config, resolve_project_id
from ..http import make_client

PROJECT_HELP = "Project ID (defaults to project_id from settings or DISCOVERY_PROJECT_ID)."
PROFILE_HELP = "Settings profile to use."
SERVICE_URL_HELP = "Override service URL."
JSON_HELP = "Print raw JSON."


def require_project(cfg: AppConfig, project: str | None) -> str:
    project_id = resolve_project_id(cfg, project)
    if not project_id:
        console.err("Project ID is required. Pass --project or set project_id in settings.")
        raise typer.Exit(code=2)
    return project_id


def fail(action: str, exc: Exception) -> NoReturn:
    if isinstance(exc, ApiError) and exc.status_code in (401, 403):
        console.err("Unauthorized. Check the configured credentials.")
    elif isinstance(exc, ApiError):
        console.err(f"Failed to {action}: {exc} (HTTP {exc.status_code})")
    elif isinstance(exc, NetworkError):
        console.err(f"Failed to {action}: network error ({exc})")
    elif isinstance(exc, (ConfigError, MissingArgumentError)):
        console.err(str(exc))
    else:
        raise exc
    raise typer.Exit(code=2)


CLIENT_ERRORS = (ApiError, NetworkError, ConfigError, MissingArgumentError)


def open_client(cfg: AppConfig, service_url: str | None) -> DiscoveryClient:
    try:
        return make_client(cfg, profile=None, service_url_override=service_url)
    except ConfigError as e:
        console.err(str(e))
        console.info("Run `discovery settings init` or export DISCOVERY_APIKEY / DISCOVERY_URL.")
        raise typer.Exit(code=2)


def load_effective_config(profile: str | None) -> AppConfig:
    return apply_profile(load_config(), profile)
