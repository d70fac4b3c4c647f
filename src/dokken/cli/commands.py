"""Command implementations for CLI."""

from typing import Callable, List

from rich.console import Console
from rich.table import Table
from rich.progress import Progress, SpinnerColumn, TextColumn

from dokken.config import ConfigManager, InstanceEntry
from dokken.driver import DokkenDriver
from dokken.state import StateStore


console = Console()


def _run_action(
    description: str,
    action: Callable[[], None],
    quiet: bool = False,
) -> None:
    """Helper to run a driver action with a progress spinner."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        disable=quiet,
    ) as progress:
        task = progress.add_task(description, total=None)

        action()

        progress.update(task, completed=True)


def list_instances(manager: ConfigManager, store: StateStore):
    """List configured instances with their last known state."""
    table = Table(title="Instances")
    table.add_column("Instance", style="cyan")
    table.add_column("Platform", style="magenta")
    table.add_column("Image")
    table.add_column("Work Image")
    table.add_column("Last Action")

    for name, entry in manager.instances.items():
        state = store.load(name)
        created = bool(state.get("runner_container"))
        last_action = "[green]Created[/green]" if created else "[dim]<Not Created>[/dim]"

        table.add_row(
            name,
            entry.instance.platform.name,
            entry.config.image,
            state.get("work_image", "-"),
            last_action,
        )

    console.print(table)


def create_instances(
    store: StateStore,
    entries: List[InstanceEntry],
    quiet: bool = False,
):
    """Create each instance, saving state even when creation fails."""
    for entry in entries:
        driver = DokkenDriver(entry.config, entry.instance)
        state = store.load(entry.name)
        try:
            _run_action(
                f"Creating {entry.name}...",
                lambda: driver.create(state),
                quiet=quiet,
            )
        finally:
            store.save(entry.name, state)

        if not quiet:
            console.print(f"[green]✓[/green] Instance {entry.name} created")


def destroy_instances(
    store: StateStore,
    entries: List[InstanceEntry],
    quiet: bool = False,
):
    """Destroy each instance and drop its state file."""
    for entry in entries:
        driver = DokkenDriver(entry.config, entry.instance)
        state = store.load(entry.name)
        _run_action(
            f"Destroying {entry.name}...",
            lambda: driver.destroy(state),
            quiet=quiet,
        )
        store.delete(entry.name)

        if not quiet:
            console.print(f"[green]✓[/green] Instance {entry.name} destroyed")
