"""Main CLI implementation using Typer."""

from pathlib import Path
from typing import Optional, Callable, Any

import typer
from rich.console import Console

from dokken.cli.commands import (
    list_instances,
    create_instances,
    destroy_instances,
)
from dokken.config import DEFAULT_CONFIG_FILE, ConfigManager
from dokken.errors import DokkenError
from dokken.state import DEFAULT_STATE_DIR, StateStore
from dokken.utils.logging import setup_logging


# Create Typer app
app = typer.Typer(
    name="dokken",
    help="Dokken - Ephemeral container test environments",
    add_completion=False,
)

# Console for rich output
console = Console()


def _run_cli_command(
    handler: Callable[..., Any],
    config: Path,
    state_dir: Path,
    **kwargs: Any,
):
    """Helper to load configuration and run a CLI command with error handling."""
    try:
        manager = ConfigManager(config)
        manager.load()
        store = StateStore(state_dir)
        handler(manager, store, **kwargs)
    except DokkenError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


def _with_selection(handler: Callable[..., Any]) -> Callable[..., Any]:
    """Adapt an instance handler to resolve its instance selection first."""
    def run(manager: ConfigManager, store: StateStore, name: Optional[str], all_instances: bool):
        entries = manager.select(name, all_instances=all_instances)
        handler(store, entries)
    return run


ConfigOption = typer.Option(
    Path(DEFAULT_CONFIG_FILE), "--config", "-c", help="Configuration file"
)
StateDirOption = typer.Option(
    Path(DEFAULT_STATE_DIR), "--state-dir", help="Directory holding instance state files"
)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        "WARNING", "--log-level", "-l", help="Log level (DEBUG, INFO, WARNING, ERROR)"
    ),
):
    """Dokken - Ephemeral container test environments."""
    setup_logging(log_level)


@app.command("list")
def list_command(
    config: Path = ConfigOption,
    state_dir: Path = StateDirOption,
):
    """List configured instances."""
    _run_cli_command(list_instances, config=config, state_dir=state_dir)


@app.command("create")
def create_command(
    name: Optional[str] = typer.Argument(None, help="Instance name or regular expression"),
    all: bool = typer.Option(False, "--all", help="Create all configured instances"),
    config: Path = ConfigOption,
    state_dir: Path = StateDirOption,
):
    """Create instance(s)."""
    if not name and not all:
        console.print("[red]Error:[/red] Specify instance name or use --all")
        raise typer.Exit(1)
    _run_cli_command(
        _with_selection(create_instances),
        config=config,
        state_dir=state_dir,
        name=name,
        all_instances=all,
    )


@app.command("destroy")
def destroy_command(
    name: Optional[str] = typer.Argument(None, help="Instance name or regular expression"),
    all: bool = typer.Option(False, "--all", help="Destroy all configured instances"),
    config: Path = ConfigOption,
    state_dir: Path = StateDirOption,
):
    """Destroy instance(s)."""
    if not name and not all:
        console.print("[red]Error:[/red] Specify instance name or use --all")
        raise typer.Exit(1)
    _run_cli_command(
        _with_selection(destroy_instances),
        config=config,
        state_dir=state_dir,
        name=name,
        all_instances=all,
    )


def main():
    """Main entry point for CLI."""
    app()
