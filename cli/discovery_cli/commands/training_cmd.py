from __future__ import annotations

from typing import Any

import typer
from discovery_client.models import TrainingExample
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

TRAINING_USAGE = """\
Usage:
  discovery training list
  discovery training get <query_id>
  discovery training create --nlq TEXT --example DOC:COLLECTION:RELEVANCE [--example ...] [--filter F]
  discovery training update <query_id> --nlq TEXT --example DOC:COLLECTION:RELEVANCE [--example ...]
  discovery training delete [--yes]
"""

app = typer.Typer(help="Training queries of a project.\n\n" + TRAINING_USAGE)

EXAMPLE_HELP = "Training example as DOCUMENT_ID:COLLECTION_ID:RELEVANCE (repeatable)."


def parse_example(raw: str) -> TrainingExample:
    parts = raw.rsplit(":", 2)
    if len(parts) != 3 or not parts[0] or not parts[1]:
        raise ValueError(f"invalid example {raw!r}, expected DOCUMENT_ID:COLLECTION_ID:RELEVANCE")
    try:
        relevance = int(parts[2])
    except ValueError:
        raise ValueError(f"invalid relevance in {raw!r}, expected an integer") from None
    return TrainingExample(document_id=parts[0], collection_id=parts[1], relevance=relevance)


def _parse_examples(raw: list[str] | None) -> list[TrainingExample]:
    try:
        return [parse_example(item) for item in raw or []]
    except ValueError as e:
        console.err(str(e))
        raise typer.Exit(code=2)


def _print_query(q: dict[str, Any]) -> None:
    console.console.print(f"query_id: {q.get('query_id', '-')}")
    console.console.print(f"natural_language_query: {q.get('natural_language_query', '-')}")
    if q.get("filter"):
        console.console.print(f"filter: {q['filter']}")
    console.console.print(f"created: {q.get('created', '-')}  updated: {q.get('updated', '-')}")
    table = Table(title="Examples")
    table.add_column("document_id", style="bold")
    table.add_column("collection_id")
    table.add_column("relevance")
    for ex in q.get("examples") or []:
        table.add_row(str(ex.get("document_id", "-")), str(ex.get("collection_id", "-")), str(ex.get("relevance", "-")))
    console.console.print(table)


@app.command("list")
def list_queries(
        project: str | None = typer.Option(None, "--project", help=PROJECT_HELP),
        profile: str | None = typer.Option(None, "--profile", help=PROFILE_HELP),
        service_url: str | None = typer.Option(None, "--service-url", help=SERVICE_URL_HELP),
        json_out: bool = typer.Option(False, "--json", help=JSON_HELP),
):
    cfg = load_effective_config(profile)
    project_id = require_project(cfg, project)
    client = open_client(cfg, service_url)
    try:
        data = client.list_training_queries(project_id).get_result()
    except CLIENT_ERRORS as e:
        fail("list training queries", e)
    finally:
        client.close()

    if json_out:
        console.print_json(data)
        return

    table = Table(title="Training queries")
    table.add_column("query_id", style="bold")
    table.add_column("natural_language_query")
    table.add_column("examples")
    table.add_column("updated")
    for q in (data.get("queries") if isinstance(data, dict) else None) or []:
        table.add_row(
            str(q.get("query_id", "-")),
            str(q.get("natural_language_query") or "-"),
            str(len(q.get("examples") or [])),
            str(q.get("updated") or "-"),
        )
    console.console.print(table)


@app.command("get")
@app.command("show", hidden=True)
def get_query(
        query_id: str = typer.Argument(..., help="Training query ID."),
        project: str | None = typer.Option(None, "--project", help=PROJECT_HELP),
        profile: str | None = typer.Option(None, "--profile", help=PROFILE_HELP),
        service_url: str | None = typer.Option(None, "--service-url", help=SERVICE_URL_HELP),
        json_out: bool = typer.Option(False, "--json", help=JSON_HELP),
):
    cfg = load_effective_config(profile)
    project_id = require_project(cfg, project)
    client = open_client(cfg, service_url)
    try:
        data = client.get_training_query(project_id, query_id).get_result()
    except CLIENT_ERRORS as e:
        fail("get training query", e)
    finally:
        client.close()

    if json_out:
        console.print_json(data)
        return
    _print_query(data if isinstance(data, dict) else {})


@app.command("create")
def create_query(
        nlq: str = typer.Option(..., "--nlq", help="Natural language query to train."),
        example: list[str] = typer.Option(..., "--example", help=EXAMPLE_HELP),
        filter_text: str | None = typer.Option(None, "--filter", help="Filter applied to the query."),
        project: str | None = typer.Option(None, "--project", help=PROJECT_HELP),
        profile: str | None = typer.Option(None, "--profile", help=PROFILE_HELP),
        service_url: str | None = typer.Option(None, "--service-url", help=SERVICE_URL_HELP),
        json_out: bool = typer.Option(False, "--json", help=JSON_HELP),
):
    examples = _parse_examples(example)
    cfg = load_effective_config(profile)
    project_id = require_project(cfg, project)
    client = open_client(cfg, service_url)
    try:
        data = client.create_training_query(project_id, nlq, examples, filter=filter_text).get_result()
    except CLIENT_ERRORS as e:
        fail("create training query", e)
    finally:
        client.close()

    if json_out:
        console.print_json(data)
        return
    console.ok(f"Training query created: {(data or {}).get('query_id', '-')}")


@app.command("update")
def update_query(
        query_id: str = typer.Argument(..., help="Training query ID."),
        nlq: str = typer.Option(..., "--nlq", help="Natural language query to train."),
        example: list[str] = typer.Option(..., "--example", help=EXAMPLE_HELP),
        filter_text: str | None = typer.Option(None, "--filter", help="Filter applied to the query."),
        project: str | None = typer.Option(None, "--project", help=PROJECT_HELP),
        profile: str | None = typer.Option(None, "--profile", help=PROFILE_HELP),
        service_url: str | None = typer.Option(None, "--service-url", help=SERVICE_URL_HELP),
        json_out: bool = typer.Option(False, "--json", help=JSON_HELP),
):
    examples = _parse_examples(example)
    cfg = load_effective_config(profile)
    project_id = require_project(cfg, project)
    client = open_client(cfg, service_url)
    try:
        data = client.update_training_query(project_id, query_id, nlq, examples, filter=filter_text).get_result()
    except CLIENT_ERRORS as e:
        fail("update training query", e)
    finally:
        client.close()

    if json_out:
        console.print_json(data)
        return
    console.ok(f"Training query updated: {query_id}")


@app.command("delete")
def delete_queries(
        yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
        project: str | None = typer.Option(None, "--project", help=PROJECT_HELP),
        profile: str | None = typer.Option(None, "--profile", help=PROFILE_HELP),
        service_url: str | None = typer.Option(None, "--service-url", help=SERVICE_URL_HELP),
):
    """Delete every training query of the project."""
    cfg = load_effective_config(profile)
    project_id = require_project(cfg, project)
    if not yes and not typer.confirm(f"Delete ALL training queries of project {project_id}?"):
        raise typer.Exit(code=0)

    client = open_client(cfg, service_url)
    try:
        client.delete_training_queries(project_id)
    except CLIENT_ERRORS as e:
        fail("delete training queries", e)
    finally:
        client.close()
    console.ok(f"Training data deleted for project {project_id}")
