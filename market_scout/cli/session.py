"""CLI commands for session management."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from market_scout.agent.normalize import compute_canonical_boundary
from market_scout.config.settings import get_settings
from market_scout.session import SessionManager

app = typer.Typer(help="Manage acquisition sessions")
console = Console()


def get_data_dir() -> Path:
    """Get the data directory (MARKET_SCOUT_DATA_DIR, user config, or default)."""
    return get_settings().data_dir


def get_manager() -> SessionManager:
    """Get the session manager."""
    return SessionManager(data_dir=get_data_dir())


@app.command("new")
def session_new(
    title: Annotated[str, typer.Argument(help="Short description of what you are hunting")],
    session_id: Annotated[str | None, typer.Option("--id", help="Custom session ID")] = None,
) -> None:
    """Create a new acquisition session."""
    manager = get_manager()
    session = manager.create_session(title, session_id=session_id)

    console.print(Panel(
        f"[bold green]Created session:[/bold green] {session.id}\n"
        f"[dim]Goal:[/dim] {session.goal_type}\n"
        f"[dim]Directory:[/dim] {manager.data_dir / session.id}",
        title="New Session",
    ))


@app.command("list")
def session_list() -> None:
    """List all available sessions."""
    manager = get_manager()
    sessions = manager.list_sessions()

    if not sessions:
        console.print("[dim]No sessions found.[/dim]")
        return

    current = manager.get_current_session()
    current_id = current.id if current else None

    table = Table(title="Sessions")
    table.add_column("ID", style="cyan")
    table.add_column("Goal")
    table.add_column("State")
    table.add_column("Created")
    table.add_column("Current", justify="center")

    for s in sessions:
        is_current = "*" if s.id == current_id else ""
        table.add_row(
            s.id,
            s.goal_type,
            s.state.value,
            s.created_at.strftime("%Y-%m-%d %H:%M"),
            is_current,
        )

    console.print(table)


@app.command("show")
def session_show() -> None:
    """Show the current session's state and boundary."""
    manager = get_manager()
    session = manager.get_current_session()

    if session is None:
        console.print("[yellow]No current session.[/yellow]")
        console.print("Use 'market-scout session new <title>' to create one.")
        raise typer.Exit(1)

    boundary = compute_canonical_boundary(session)
    vehicle = session.intent.vehicle
    described = " ".join(p for p in [vehicle.year_range, vehicle.make, vehicle.model, vehicle.gen] if p)

    console.print(Panel(
        f"[bold]State:[/bold] {session.state.value}\n"
        f"[bold]Vehicle:[/bold] {described or '-'}",
        title=f"Session: {session.id}",
    ))

    table = Table(title="Boundary")
    table.add_column("Tier", style="cyan")
    table.add_column("Rules")
    table.add_row("Tier 1", "\n".join(boundary.tier1) or "-")
    table.add_row("Tier 2", "\n".join(boundary.tier2) or "-")
    table.add_row("Reject", "\n".join(boundary.hard_rejections) or "-")
    console.print(table)

    if session.finalists:
        candidates = Table(title="Finalists")
        candidates.add_column("Verdict")
        candidates.add_column("Score", justify="right")
        candidates.add_column("Title")
        for c in session.finalists:
            candidates.add_row(c.verdict, str(c.score), c.title)
        console.print(candidates)


@app.command("switch")
def session_switch(
    session_id: Annotated[str, typer.Argument(help="Session ID to switch to")],
) -> None:
    """Switch to a different session."""
    manager = get_manager()
    session = manager.switch_session(session_id)

    if session is None:
        console.print(f"[red]Session '{session_id}' not found.[/red]")
        raise typer.Exit(1)

    console.print(f"[green]Switched to session:[/green] {session.id}")


@app.command("delete")
def session_delete(
    session_id: Annotated[str, typer.Argument(help="Session ID to delete")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation")] = False,
) -> None:
    """Delete a session and all its data."""
    manager = get_manager()

    if not yes:
        confirm = typer.confirm(f"Delete session '{session_id}' and all its data?")
        if not confirm:
            console.print("[dim]Cancelled.[/dim]")
            raise typer.Exit(0)

    deleted = manager.delete_session(session_id)

    if deleted:
        console.print(f"[green]Deleted session:[/green] {session_id}")
    else:
        console.print(f"[red]Session '{session_id}' not found.[/red]")
        raise typer.Exit(1)
