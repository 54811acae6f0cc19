from __future__ import annotations

import typer

from .commands import choose_cmd, settings_cmd
from .logging_ import setup_logging


def _build_app() -> typer.Typer:
    app = typer.Typer(
        name="pp",
        help="Preferred Pictures signed URL tool",
        no_args_is_help=True,
    )

    app.add_typer(settings_cmd.app, name="settings")
    app.command("choose-url")(choose_cmd.choose_url)
    app.command("report-action")(choose_cmd.report_action)

    @app.callback()
    def _main(
            verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logs."),
    ):
        setup_logging(verbose)

    return app


app = _build_app()
