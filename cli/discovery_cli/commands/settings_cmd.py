from __future__ import annotations

import os

import typer

from .. import console
from ..config import config_path, default_config, load_config, normalize_service_url, save_config

app = typer.Typer(help="Manage local CLI settings (~/.config/discovery/config.toml).")

SETTING_KEYS = ("version", "service_url", "project_id", "auth_type")
AUTH_TYPES = ("iam", "bearertoken", "basic", "noauth")


def _check_auth_type(auth_type: str | None) -> str | None:
    if auth_type is None:
        return None
    value = auth_type.strip().lower()
    if value not in AUTH_TYPES:
        console.err(f"Unknown auth type: {auth_type}. Use one of: {', '.join(AUTH_TYPES)}.")
        raise typer.Exit(code=2)
    return value


@app.command("init")
def init_settings(
        force: bool = typer.Option(False, "--force", help="Overwrite existing config."),
        service_url: str = typer.Option(
            ...,
            "--service-url",
            prompt="Service URL",
            help="Discovery instance URL like https://api.us-south.discovery.watson.cloud.ibm.com/instances/<id>",
        ),
        version: str = typer.Option(default_config().version, "--version", help="API version date (YYYY-MM-DD)."),
        project_id: str | None = typer.Option(None, "--project", help="Default project ID."),
        apikey: str | None = typer.Option(None, "--apikey", help="IAM API key."),
):
    path = config_path()
    if os.path.exists(path) and not force:
        console.info(f"Config already exists: {path}")
        console.info("Use --force to overwrite.")
        return

    cfg = default_config()
    cfg.service_url = normalize_service_url(service_url, warn=True)
    if not cfg.service_url:
        console.err("Service URL cannot be empty.")
        raise typer.Exit(code=2)
    cfg.version = version.strip()
    cfg.project_id = (project_id or "").strip()
    if apikey:
        cfg.auth.auth_type = "iam"
        cfg.auth.apikey = apikey.strip()
    saved = save_config(cfg)
    console.ok(f"Config written: {saved}")


@app.command("show")
def show_settings():
    cfg = load_config()
    secret_state = "(set)" if (cfg.auth.apikey or cfg.auth.bearer_token or cfg.auth.password) else "(empty)"
    console.console.print(
        f"version={cfg.version} service_url={cfg.service_url or '-'} project_id={cfg.project_id or '-'} "
        f"auth_type={cfg.auth.auth_type or '(environment)'} credentials={secret_state}"
    )
    if cfg.profiles:
        console.console.print(f"profiles={', '.join(sorted(cfg.profiles))}")


@app.command("get")
def get_setting(
        key: str = typer.Argument(..., help="Setting key (version, service_url, project_id, auth_type)."),
):
    cfg = load_config()
    k = key.strip().lower()
    if k not in SETTING_KEYS:
        console.err(f"Unknown setting: {key}")
        raise typer.Exit(code=2)
    value = cfg.auth.auth_type if k == "auth_type" else getattr(cfg, k)
    console.console.print(value or "")


@app.command("set")
def set_setting(
        version: str | None = typer.Option(None, "--version", help="Set API version date."),
        service_url: str | None = typer.Option(None, "--service-url", help="Set service URL."),
        project_id: str | None = typer.Option(None, "--project", help="Set default project ID."),
        auth_type: str | None = typer.Option(None, "--auth-type", help="iam, bearertoken, basic or noauth."),
        apikey: str | None = typer.Option(None, "--apikey", help="Set IAM API key."),
        bearer_token: str | None = typer.Option(None, "--bearer-token", help="Set bearer token."),
        username: str | None = typer.Option(None, "--username", help="Set basic auth username."),
        password: str | None = typer.Option(None, "--password", help="Set basic auth password."),
        iam_url: str | None = typer.Option(None, "--iam-url", help="Set IAM token endpoint base URL."),
):
    cfg = load_config()
    if version is not None:
        cfg.version = version.strip()
    if service_url is not None:
        cfg.service_url = normalize_service_url(service_url, warn=True)
    if project_id is not None:
        cfg.project_id = project_id.strip()
    auth_type = _check_auth_type(auth_type)
    if auth_type is not None:
        cfg.auth.auth_type = auth_type
    if apikey is not None:
        cfg.auth.apikey = apikey.strip()
    if bearer_token is not None:
        cfg.auth.bearer_token = bearer_token.strip()
    if username is not None:
        cfg.auth.username = username
    if password is not None:
        cfg.auth.password = password
    if iam_url is not None:
        cfg.auth.iam_url = iam_url.strip().rstrip("/")
    saved = save_config(cfg)
    console.ok(f"Settings updated: {saved}")
