"""Doctor command for environment diagnostics."""

from __future__ import annotations

import httpx
import typer
from rich.console import Console
from rich.table import Table

from adapters.gotify_client import GotifyCounter
from adapters.http_client import build_client
from core.config import AppSettings, load_settings, write_user_env_vars
from core.errors import GotifyError

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


def _check_health(settings: AppSettings, base_url: str) -> tuple[bool, str]:
    """Unauthenticated probe of Gotify's `/health` endpoint."""

    try:
        with build_client(settings) as client:
            response = client.get(f"{base_url}/health")
    except httpx.HTTPError as exc:
        return False, str(exc)
    if response.status_code != 200:
        return False, f"HTTP {response.status_code}"
    health = "unknown"
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        health = payload.get("health", health)
    return True, f"HTTP {response.status_code} (health={health})"


def _check_auth(settings: AppSettings) -> tuple[bool, str]:
    try:
        with GotifyCounter.from_settings(settings) as counter:
            applications = counter.count_applications()
    except GotifyError as exc:
        return False, str(exc)
    return True, f"{applications} applications visible"


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    table = Table(title="gotify-widget Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    try:
        settings = load_settings()
        endpoint = settings.endpoint()
    except GotifyError as exc:
        table.add_row("Config", "FAIL", exc.message)
        _console.print(table)
        _console.print("\n[yellow]Run[/yellow] `gotify-widget doctor setup` to store the URL and key.")
        raise typer.Exit(code=1)

    table.add_row("Gotify URL", "OK", endpoint.base_url)
    table.add_row("Gotify key", "OK", "set")
    table.add_row("Timeout", "OK", f"{settings.http_timeout_seconds:g}s")
    if settings.max_pages is None:
        table.add_row("Max pages", "OPTIONAL", "unbounded message pagination")
    else:
        table.add_row("Max pages", "OK", str(settings.max_pages))

    # Connectivity
    ok_http, detail_http = _check_health(settings, endpoint.base_url)
    table.add_row("HTTP connectivity", "OK" if ok_http else "FAIL", detail_http)

    ok_auth = False
    if ok_http:
        ok_auth, detail_auth = _check_auth(settings)
        table.add_row("Key accepted", "OK" if ok_auth else "FAIL", detail_auth)

    _console.print(table)

    if not (ok_http and ok_auth):
        raise typer.Exit(code=1)


@app.command(name="setup")
def setup() -> None:
    """Interactive setup (stores URL and key in the user config .env)."""

    url = typer.prompt("Gotify URL", default="http://localhost:8080", show_default=True).strip()
    key = typer.prompt("Gotify client token", hide_input=True, confirmation_prompt=False).strip()

    if not url or not key:
        raise typer.BadParameter("url and key are required")

    env_path = write_user_env_vars(
        {
            "GOTIFY_WIDGET_URL": url,
            "GOTIFY_WIDGET_KEY": key,
        }
    )

    _console.print(f"[green]Saved Gotify config to:[/green] {env_path}")
