"""CLI de gotify-widget (Typer + Rich).

Comandos:
- `counts`: consulta el servidor y muestra/exporta los conteos del widget.
- `doctor run` / `doctor setup`: diagnóstico y configuración guiada.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from adapters.gotify_client import GotifyCounter
from adapters.json_exporter import dumps_counts, export_counts_json
from cli import doctor
from cli.ui_components import build_counts_table, build_error_panel, print_banner
from core.config import load_settings
from core.errors import GotifyError
from core.logging_setup import configure_logging
from core.services.widget_service import fetch_counts

app = typer.Typer(
    no_args_is_help=True,
    help="Count Gotify applications, clients and messages for a dashboard widget.",
)
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)

logger = logging.getLogger(__name__)


@app.command()
def counts(
    url: Optional[str] = typer.Option(None, "--url", help="Gotify base URL (overrides GOTIFY_WIDGET_URL)."),
    key: Optional[str] = typer.Option(None, "--key", help="Gotify client token (overrides GOTIFY_WIDGET_KEY)."),
    as_json: bool = typer.Option(False, "--json", help="Print JSON to stdout instead of a table."),
    homepage: bool = typer.Option(False, "--homepage", help="Use the Homepage widget payload shape for JSON."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write JSON to this file."),
    max_pages: Optional[int] = typer.Option(
        None, "--max-pages", min=1, help="Stop counting messages after this many pages."
    ),
    timeout: Optional[float] = typer.Option(None, "--timeout", min=0.1, help="Per-request timeout in seconds."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level (DEBUG, INFO, WARNING...)."),
) -> None:
    """Fetch application, client and message counts."""

    try:
        settings = load_settings(
            url=url,
            key=key,
            max_pages=max_pages,
            http_timeout_seconds=timeout,
            log_level=log_level,
        )
    except GotifyError as exc:
        _err_console.print(build_error_panel(exc))
        raise typer.Exit(code=1)
    configure_logging(settings.log_level)

    interactive = not as_json and output is None
    if interactive:
        print_banner(_console)

    try:
        with GotifyCounter.from_settings(settings) as counter:
            result = fetch_counts(counter)
    except GotifyError as exc:
        logger.debug("counting failed", exc_info=True)
        _err_console.print(build_error_panel(exc))
        raise typer.Exit(code=1)

    if output is not None:
        path = export_counts_json(counts=result, output_path=output, homepage=homepage)
        _err_console.print(f"[green]Saved counts to:[/green] {path}")
    if as_json:
        typer.echo(dumps_counts(result, homepage=homepage), nl=False)
    if interactive:
        _console.print(build_counts_table(result, source=counter.endpoint.base_url))


def run() -> None:
    app()


if __name__ == "__main__":
    run()
