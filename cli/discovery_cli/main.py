from __future__ import annotations

import typer

from .commands import collections_cmd, documents_cmd, query_cmd, settings_cmd, training_cmd
from .logging_ import setup_logging


def _build_app() -> typer.Typer:
    app = typer.Typer(
        name="discovery",
        help="Discovery v2 command line client",
        no_args_is_help=True,
    )

    app.add_typer(settings_cmd.app, name="settings")
    app.add_typer(collections_cmd.app, name="collections")
    app.add_typer(documents_cmd.app, name="documents")
    app.add_typer(training_cmd.app, name="training")
    app.command("fields")(collections_cmd.list_fields)
    app.command("component-settings")(collections_cmd.component_settings)
    app.command("query")(query_cmd.query)
    app.command("autocomplete")(query_cmd.autocomplete)
    app.command("notices")(query_cmd.notices)

    @app.callback()
    def _main(
            verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logs."),
    ):
        setup_logging(verbose)

    return app


app = _build_app()


def main() -> None:
    app()


if __name__ == "__main__":
    main()
