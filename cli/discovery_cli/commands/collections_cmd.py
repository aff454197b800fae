from __future__ import annotations

import typer
from rich.table import Table

from .. import console
from .common import (
    CLIENT_ERRORS,
    JSON_HELP,
    PROFILE_HELP,
    PROJECT_HELP,
    SERVICE_URL_HELP,
    fail,
    load_effective_config,
    open_client,
    require_project,
)

app = typer.Typer(help="Collections of a project.")


@app.command("list")
def list_collections(
        project: str | None = typer.Option(None, "--project", help=PROJECT_HELP),
        profile: str | None = typer.Option(None, "--profile", help=PROFILE_HELP),
        service_url: str | None = typer.Option(None, "--service-url", help=SERVICE_URL_HELP),
        json_out: bool = typer.Option(False, "--json", help=JSON_HELP),
):
    cfg = load_effective_config(profile)
    project_id = require_project(cfg, project)
    client = open_client(cfg, service_url)
    try:
        data = client.list_collections(project_id).get_result()
    except CLIENT_ERRORS as e:
        fail("list collections", e)
    finally:
        client.close()

    if json_out:
        console.print_json(data)
        return

    items = data.get("collections") if isinstance(data, dict) else []
    table = Table(title=f"Collections of {project_id}")
    table.add_column("collection_id", style="bold")
    table.add_column("name")
    for c in items or []:
        table.add_row(str(c.get("collection_id", "-")), str(c.get("name") or "-"))
    console.console.print(table)


def list_fields(
        collection_id: list[str] | None = typer.Option(None, "--collection-id", help="Limit to collection (repeatable)."),
        project: str | None = typer.Option(None, "--project", help=PROJECT_HELP),
        profile: str | None = typer.Option(None, "--profile", help=PROFILE_HELP),
        service_url: str | None = typer.Option(None, "--service-url", help=SERVICE_URL_HELP),
        json_out: bool = typer.Option(False, "--json", help=JSON_HELP),
):
    """List the fields indexed in the project's collections."""
    cfg = load_effective_config(profile)
    project_id = require_project(cfg, project)
    client = open_client(cfg, service_url)
    try:
        data = client.list_fields(project_id, collection_ids=collection_id or None).get_result()
    except CLIENT_ERRORS as e:
        fail("list fields", e)
    finally:
        client.close()

    if json_out:
        console.print_json(data)
        return

    table = Table(title="Fields")
    table.add_column("field", style="bold")
    table.add_column("type")
    table.add_column("collection_id")
    for f in (data.get("fields") if isinstance(data, dict) else None) or []:
        table.add_row(str(f.get("field", "-")), str(f.get("type") or "-"), str(f.get("collection_id") or "-"))
    console.console.print(table)


def component_settings(
        project: str | None = typer.Option(None, "--project", help=PROJECT_HELP),
        profile: str | None = typer.Option(None, "--profile", help=PROFILE_HELP),
        service_url: str | None = typer.Option(None, "--service-url", help=SERVICE_URL_HELP),
):
    """Show the default UI component settings of a project."""
    cfg = load_effective_config(profile)
    project_id = require_project(cfg, project)
    client = open_client(cfg, service_url)
    try:
        data = client.get_component_settings(project_id).get_result()
    except CLIENT_ERRORS as e:
        fail("get component settings", e)
    finally:
        client.close()

    console.print_json(data)
