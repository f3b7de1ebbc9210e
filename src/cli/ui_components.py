"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import AggregateCounts
from core.errors import GotifyError, UpstreamStatusError


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida (solo en modo interactivo)."""

    title = Text("gotify-widget", style="bold cyan")
    subtitle = Text("Applications • Clients • Messages", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_counts_table(counts: AggregateCounts, *, source: str | None = None) -> Table:
    table = Table(title="Gotify", caption=source)
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Count", style="bold white", justify="right")
    table.add_row("Applications", str(counts.applications))
    table.add_row("Clients", str(counts.clients))
    table.add_row("Messages", str(counts.messages))
    return table


def build_error_panel(error: GotifyError) -> Panel:
    """Panel para presentar un fallo contra el servidor."""

    body = Text()
    body.append(error.message + "\n")
    if error.endpoint:
        body.append(f"\nEndpoint: {error.endpoint}", style="dim")
    if error.phase:
        body.append(f"\nPhase: {error.phase}", style="dim")
    if isinstance(error, UpstreamStatusError):
        body.append(f"\nStatus: {error.status}", style="dim")

    return Panel(body, title=Text(type(error).__name__, style="bold red"), border_style="red")
