"""Main CLI entry point for market-scout."""

import asyncio
import json
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel

from market_scout import __version__
from market_scout.agent.turn import TurnPipeline, TurnResult
from market_scout.cli import session as session_cli
from market_scout.cli import watch as watch_cli
from market_scout.config.settings import USER_CONFIG_FILE, get_settings, init_user_config
from market_scout.core.types import Session
from market_scout.market.seed import derive_explore_seed
from market_scout.session import SessionManager, SessionPayloadError, export_artifacts

app = typer.Typer(
    name="market-scout",
    help="A boundary-first vehicle acquisition agent.",
    add_completion=False,
)
app.add_typer(session_cli.app, name="session")
app.add_typer(watch_cli.app, name="watch")

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"market-scout version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = False,
) -> None:
    """Market Scout: define the boundary, then search the market."""
    pass


def _resolve_session(manager: SessionManager, session_id: str | None) -> Session:
    """Load the requested (or current) session, exiting on failure."""
    try:
        session = manager.load_session(session_id) if session_id else manager.get_current_session()
    except SessionPayloadError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if session is None:
        if session_id:
            console.print(f"[red]Session '{session_id}' not found.[/red]")
        else:
            console.print("[yellow]No current session.[/yellow]")
            console.print("Use 'market-scout session new <title>' to create one.")
        raise typer.Exit(1)
    return session


# =============================================================================
# Chat Command
# =============================================================================


@app.command()
def chat(
    message: Annotated[str, typer.Argument(help="Your next message to the agent")],
    session_id: Annotated[
        Optional[str], typer.Option("--session", "-s", help="Session ID (defaults to current)")
    ] = None,
    offline: Annotated[
        bool, typer.Option("--offline", help="Skip the extraction model for this turn")
    ] = False,
) -> None:
    """Send one message and advance the session by a turn."""
    manager = session_cli.get_manager()
    session = _resolve_session(manager, session_id)

    settings = get_settings()
    if offline:
        settings = settings.model_copy(update={"llm_enabled": False})

    pipeline = TurnPipeline(settings=settings, watch_service=watch_cli.get_watch_service())
    result = asyncio.run(_chat_async(pipeline, session, message))

    manager.save_session(result.session)
    console.print(Panel(Markdown(result.message), title=result.session.state.value))
    if result.extraction == "fallback":
        console.print("[dim]Extraction unavailable; continued with deterministic rules.[/dim]")


async def _chat_async(pipeline: TurnPipeline, session: Session, message: str) -> TurnResult:
    return await pipeline.process_turn(session, message)


# =============================================================================
# Seed / Export Commands
# =============================================================================


@app.command()
def seed(
    session_id: Annotated[
        Optional[str], typer.Option("--session", "-s", help="Session ID (defaults to current)")
    ] = None,
) -> None:
    """Show the explore seed derived from the session."""
    manager = session_cli.get_manager()
    session = _resolve_session(manager, session_id)

    explore_seed = derive_explore_seed(session)
    console.print_json(explore_seed.model_dump_json(exclude_none=True))


@app.command()
def export(
    session_id: Annotated[
        Optional[str], typer.Option("--session", "-s", help="Session ID (defaults to current)")
    ] = None,
    output: Annotated[
        Optional[Path], typer.Option("--output", "-o", help="Output file (JSON)")
    ] = None,
) -> None:
    """Export session, intent, constraints, candidates and watch documents."""
    manager = session_cli.get_manager()
    session = _resolve_session(manager, session_id)

    artifacts = export_artifacts(session)
    if output is None:
        console.print_json(json.dumps(artifacts, ensure_ascii=False))
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w", encoding="utf-8") as f:
        json.dump(artifacts, f, ensure_ascii=False, indent=2)
    console.print(f"[green]Artifacts written to:[/green] {output}")


# =============================================================================
# Config Commands
# =============================================================================


config_app = typer.Typer(help="Manage configuration")
app.add_typer(config_app, name="config")


@config_app.command("show")
def config_show() -> None:
    """Show current configuration."""
    settings = get_settings()

    def _mask_key(raw_key: str) -> str:
        if not raw_key:
            return "[red]Not set[/red]"
        return raw_key[:6] + "..." + raw_key[-4:] if len(raw_key) > 14 else "***"

    console.print(Panel("[bold]Market Scout Configuration[/bold]"))

    console.print("\n[bold]Config Files:[/bold]")
    console.print(f"  User config: {USER_CONFIG_FILE}")
    console.print(f"  Exists: {USER_CONFIG_FILE.exists()}")

    console.print("\n[bold]General:[/bold]")
    console.print(f"  Live search: {settings.live_search_enabled}")
    console.print(f"  Extraction model: {settings.llm_enabled}")
    console.print(f"  Data dir: {settings.data_dir}")
    console.print(f"  Watch sources: {', '.join(settings.watch_sources)}")

    console.print("\n[bold]auto.dev:[/bold]")
    console.print(f"  Base URL: {settings.autodev.base_url}")
    console.print(f"  API Key: {_mask_key(settings.autodev.api_key.get_secret_value())}")
    console.print(f"  Top N: {settings.autodev.top_n}")
    console.print(f"  Timeout: {settings.autodev.timeout_ms}ms")

    console.print("\n[bold]OpenAI:[/bold]")
    console.print(f"  Base URL: {settings.openai.base_url}")
    console.print(f"  API Key: {_mask_key(settings.openai.api_key.get_secret_value())}")
    console.print(f"  Model: {settings.openai.model}")
    console.print(f"  Temperature: {settings.openai.temperature}")


@config_app.command("init")
def config_init() -> None:
    """Initialize user configuration file.

    Creates ~/.config/market-scout/config.yaml with a template.
    """
    config_path = init_user_config()
    console.print(f"[green]Configuration file created at:[/green] {config_path}")
    console.print("\nEdit this file to set your API keys and other options.")
    console.print("Environment variables will override settings in this file.")


@config_app.command("path")
def config_path() -> None:
    """Show the path to the user configuration file."""
    console.print(f"User config file: {USER_CONFIG_FILE}")
    if USER_CONFIG_FILE.exists():
        console.print("[green]File exists[/green]")
    else:
        console.print("[yellow]File does not exist. Run 'market-scout config init' to create it.[/yellow]")


if __name__ == "__main__":
    app()
