from __future__ import annotations

import typer
from discovery_client.models import QueryLargePassages
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


def _result_title(result: dict) -> str:
    title = result.get("title")
    if isinstance(title, list):
        title = title[0] if title else None
    if not title:
        extracted = result.get("extracted_metadata") or {}
        title = extracted.get("title") or extracted.get("filename")
    return str(title or "-")


def query(
        nlq: str | None = typer.Option(None, "--nlq", help="Natural language query."),
        query_text: str | None = typer.Option(None, "--query", help="Discovery Query Language query."),
        filter_text: str | None = typer.Option(None, "--filter", help="Cacheable filter."),
        aggregation: str | None = typer.Option(None, "--aggregation", help="Aggregation expression."),
        collection_id: list[str] | None = typer.Option(None, "--collection-id", help="Collection to query (repeatable)."),
        count: int | None = typer.Option(None, "--count", help="Number of results."),
        offset: int | None = typer.Option(None, "--offset", help="Results to skip."),
        sort: str | None = typer.Option(None, "--sort", help="Comma-separated sort fields, prefix - for descending."),
        return_field: list[str] | None = typer.Option(None, "--return", help="Field to return (repeatable)."),
        highlight: bool | None = typer.Option(None, "--highlight/--no-highlight", help="Return highlights."),
        spelling_suggestions: bool | None = typer.Option(
            None, "--spelling-suggestions/--no-spelling-suggestions", help="Spell check the natural language query."
        ),
        passages: bool | None = typer.Option(None, "--passages/--no-passages", help="Enable passage retrieval."),
        project: str | None = typer.Option(None, "--project", help=PROJECT_HELP),
        profile: str | None = typer.Option(None, "--profile", help=PROFILE_HELP),
        service_url: str | None = typer.Option(None, "--service-url", help=SERVICE_URL_HELP),
        json_out: bool = typer.Option(False, "--json", help=JSON_HELP),
):
    """Query a project."""
    cfg = load_effective_config(profile)
    project_id = require_project(cfg, project)
    client = open_client(cfg, service_url)
    try:
        data = client.query(
            project_id,
            collection_ids=collection_id or None,
            filter=filter_text,
            query=query_text,
            natural_language_query=nlq,
            aggregation=aggregation,
            count=count,
            return_=return_field or None,
            offset=offset,
            sort=sort,
            highlight=highlight,
            spelling_suggestions=spelling_suggestions,
            passages=QueryLargePassages(enabled=passages) if passages is not None else None,
        ).get_result()
    except CLIENT_ERRORS as e:
        fail("query project", e)
    finally:
        client.close()

    if json_out:
        console.print_json(data)
        return

    data = data if isinstance(data, dict) else {}
    console.info(f"matching_results={data.get('matching_results', 0)}")
    if data.get("suggested_query"):
        console.info(f"did you mean: {data['suggested_query']}")

    table = Table(title="Results")
    table.add_column("document_id", style="bold")
    table.add_column("collection_id")
    table.add_column("confidence")
    table.add_column("title")
    for r in data.get("results") or []:
        meta = r.get("result_metadata") or {}
        confidence = meta.get("confidence")
        table.add_row(
            str(r.get("document_id", "-")),
            str(meta.get("collection_id") or "-"),
            f"{confidence:.3f}" if isinstance(confidence, (int, float)) else "-",
            _result_title(r),
        )
    console.console.print(table)


def autocomplete(
        prefix: str = typer.Argument(..., help="Prefix to complete."),
        collection_id: list[str] | None = typer.Option(None, "--collection-id", help="Collection to use (repeatable)."),
        field: str | None = typer.Option(None, "--field", help="Field to draw completions from."),
        count: int | None = typer.Option(None, "--count", help="Number of completions."),
        project: str | None = typer.Option(None, "--project", help=PROJECT_HELP),
        profile: str | None = typer.Option(None, "--profile", help=PROFILE_HELP),
        service_url: str | None = typer.Option(None, "--service-url", help=SERVICE_URL_HELP),
        json_out: bool = typer.Option(False, "--json", help=JSON_HELP),
):
    """Autocompletion suggestions for a prefix."""
    cfg = load_effective_config(profile)
    project_id = require_project(cfg, project)
    client = open_client(cfg, service_url)
    try:
        data = client.get_autocompletion(
            project_id,
            prefix,
            collection_ids=collection_id or None,
            field=field,
            count=count,
        ).get_result()
    except CLIENT_ERRORS as e:
        fail("get autocompletion", e)
    finally:
        client.close()

    if json_out:
        console.print_json(data)
        return
    for completion in (data.get("completions") if isinstance(data, dict) else None) or []:
        console.console.print(completion)


def notices(
        filter_text: str | None = typer.Option(None, "--filter", help="Cacheable filter."),
        query_text: str | None = typer.Option(None, "--query", help="Discovery Query Language query."),
        nlq: str | None = typer.Option(None, "--nlq", help="Natural language query."),
        count: int | None = typer.Option(None, "--count", help="Number of notices."),
        offset: int | None = typer.Option(None, "--offset", help="Notices to skip."),
        project: str | None = typer.Option(None, "--project", help=PROJECT_HELP),
        profile: str | None = typer.Option(None, "--profile", help=PROFILE_HELP),
        service_url: str | None = typer.Option(None, "--service-url", help=SERVICE_URL_HELP),
        json_out: bool = typer.Option(False, "--json", help=JSON_HELP),
):
    """Ingestion and training notices of a project."""
    cfg = load_effective_config(profile)
    project_id = require_project(cfg, project)
    client = open_client(cfg, service_url)
    try:
        data = client.query_notices(
            project_id,
            filter=filter_text,
            query=query_text,
            natural_language_query=nlq,
            count=count,
            offset=offset,
        ).get_result()
    except CLIENT_ERRORS as e:
        fail("query notices", e)
    finally:
        client.close()

    if json_out:
        console.print_json(data)
        return

    data = data if isinstance(data, dict) else {}
    table = Table(title=f"Notices ({data.get('matching_results', 0)})")
    table.add_column("severity", style="bold")
    table.add_column("step")
    table.add_column("document_id")
    table.add_column("created")
    table.add_column("description")
    for n in data.get("notices") or []:
        table.add_row(
            str(n.get("severity") or "-"),
            str(n.get("step") or "-"),
            str(n.get("document_id") or "-"),
            str(n.get("created") or "-"),
            str(n.get("description") or ""),
        )
    console.console.print(table)
