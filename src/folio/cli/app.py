from typing import Annotated

import typer

from folio.cli.log import configure_logging
from folio.cli.query import query_app
from folio.cli.serve import serve_app
from folio.cli.show import render, show
from folio.config import load_settings

app = typer.Typer(
    name="folio",
    help="Folio CLI: query, show and render the posts of a markdown content tree.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback()
def _configure(
    log_level: Annotated[
        str | None, typer.Option("--log-level", help="Logging level (default: FOLIO_LOG_LEVEL).")
    ] = None,
) -> None:
    try:
        configure_logging(log_level or load_settings().log_level)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--log-level / FOLIO_*") from exc


app.add_typer(query_app, name="query")
app.command("show")(show)
app.command("render")(render)
app.add_typer(serve_app, name="serve")


def main() -> None:
    app()
