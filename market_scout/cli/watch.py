"""CLI commands for saved watches."""

import typer
from rich.console import Console
from rich.table import Table

from market_scout.config.settings import get_settings
from market_scout.market.watch import WatchService
from market_scout.market.watch_store import JsonFileWatchStore

app = typer.Typer(help="Inspect saved watches")
console = Console()


def get_watch_service() -> WatchService:
    """Watch service backed by the JSON store in the data directory."""
    settings = get_settings()
    store = JsonFileWatchStore(settings.watch_store_path)
    return WatchService(store=store, sources=settings.watch_sources)


@app.command("list")
def watch_list() -> None:
    """List all saved watches."""
    watches = get_watch_service().list_watches()

    if not watches:
        console.print("[dim]No watches saved.[/dim]")
        return

    table = Table(title="Watches")
    table.add_column("#", justify="right")
    table.add_column("Must-have", style="cyan")
    table.add_column("Reject")
    table.add_column("Sources")
    table.add_column("Cadence")

    for i, w in enumerate(watches, start=1):
        table.add_row(
            str(i),
            "\n".join(w.must_have) or "-",
            "\n".join(w.reject) or "-",
            ", ".join(w.sources),
            w.cadence or "-",
        )

    console.print(table)
