from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import typer

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

app = typer.Typer(help="Add, update and delete documents in a collection.")

FILE_HELP = "Document to upload."
CONTENT_TYPE_HELP = "Content type of the file; the service sniffs it when omitted."
METADATA_HELP = "Metadata as a JSON object (max 1 MB)."
FORCE_HELP = "Skip the shared data source check between collections."


def _parse_metadata(raw: str | None) -> str | None:
    if raw is None:
        return None
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        console.err(f"--metadata must be valid JSON: {e}")
        raise typer.Exit(code=2)
    if not isinstance(value, dict):
        console.err("--metadata must be a JSON object.")
        raise typer.Exit(code=2)
    return raw


def _print_status(data: Any, json_out: bool) -> None:
    if json_out:
        console.print_json(data)
        return
    data = data if isinstance(data, dict) else {}
    console.ok(f"document_id={data.get('document_id', '-')} status={data.get('status', '-')}")
    for notice in data.get("notices") or []:
        console.warn(str(notice.get("description") or notice))


@app.command("add")
def add_document(
        collection_id: str = typer.Argument(..., help="Collection ID."),
        file: Path = typer.Option(..., "--file", exists=True, dir_okay=False, readable=True, help=FILE_HELP),
        content_type: str | None = typer.Option(None, "--content-type", help=CONTENT_TYPE_HELP),
        metadata: str | None = typer.Option(None, "--metadata", help=METADATA_HELP),
        force: bool = typer.Option(False, "--force", help=FORCE_HELP),
        project: str | None = typer.Option(None, "--project", help=PROJECT_HELP),
        profile: str | None = typer.Option(None, "--profile", help=PROFILE_HELP),
        service_url: str | None = typer.Option(None, "--service-url", help=SERVICE_URL_HELP),
        json_out: bool = typer.Option(False, "--json", help=JSON_HELP),
):
    metadata_text = _parse_metadata(metadata)
    cfg = load_effective_config(profile)
    project_id = require_project(cfg, project)
    client = open_client(cfg, service_url)
    try:
        with file.open("rb") as fh:
            data = client.add_document(
                project_id,
                collection_id,
                file=fh,
                file_content_type=content_type,
                metadata=metadata_text,
                x_watson_discovery_force=force or None,
            ).get_result()
    except CLIENT_ERRORS as e:
        fail("add document", e)
    finally:
        client.close()

    _print_status(data, json_out)


@app.command("update")
def update_document(
        collection_id: str = typer.Argument(..., help="Collection ID."),
        document_id: str = typer.Argument(..., help="Document ID."),
        file: Path | None = typer.Option(None, "--file", exists=True, dir_okay=False, readable=True, help=FILE_HELP),
        content_type: str | None = typer.Option(None, "--content-type", help=CONTENT_TYPE_HELP),
        metadata: str | None = typer.Option(None, "--metadata", help=METADATA_HELP),
        force: bool = typer.Option(False, "--force", help=FORCE_HELP),
        project: str | None = typer.Option(None, "--project", help=PROJECT_HELP),
        profile: str | None = typer.Option(None, "--profile", help=PROFILE_HELP),
        service_url: str | None = typer.Option(None, "--service-url", help=SERVICE_URL_HELP),
        json_out: bool = typer.Option(False, "--json", help=JSON_HELP),
):
    if file is None and metadata is None:
        console.err("Nothing to update. Pass --file and/or --metadata.")
        raise typer.Exit(code=2)
    metadata_text = _parse_metadata(metadata)
    cfg = load_effective_config(profile)
    project_id = require_project(cfg, project)
    client = open_client(cfg, service_url)
    try:
        if file is not None:
            with file.open("rb") as fh:
                resp = client.update_document(
                    project_id,
                    collection_id,
                    document_id,
                    file=fh,
                    file_content_type=content_type,
                    metadata=metadata_text,
                    x_watson_discovery_force=force or None,
                )
        else:
            resp = client.update_document(
                project_id,
                collection_id,
                document_id,
                metadata=metadata_text,
                x_watson_discovery_force=force or None,
            )
        data = resp.get_result()
    except CLIENT_ERRORS as e:
        fail("update document", e)
    finally:
        client.close()

    _print_status(data, json_out)


@app.command("delete")
def delete_document(
        collection_id: str = typer.Argument(..., help="Collection ID."),
        document_id: str = typer.Argument(..., help="Document ID."),
        yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
        force: bool = typer.Option(False, "--force", help=FORCE_HELP),
        project: str | None = typer.Option(None, "--project", help=PROJECT_HELP),
        profile: str | None = typer.Option(None, "--profile", help=PROFILE_HELP),
        service_url: str | None = typer.Option(None, "--service-url", help=SERVICE_URL_HELP),
        json_out: bool = typer.Option(False, "--json", help=JSON_HELP),
):
    cfg = load_effective_config(profile)
    project_id = require_project(cfg, project)
    if not yes and not typer.confirm(f"Delete document {document_id} from collection {collection_id}?"):
        raise typer.Exit(code=0)

    client = open_client(cfg, service_url)
    try:
        data = client.delete_document(
            project_id,
            collection_id,
            document_id,
            x_watson_discovery_force=force or None,
        ).get_result()
    except CLIENT_ERRORS as e:
        fail("delete document", e)
    finally:
        client.close()

    _print_status(data, json_out)
