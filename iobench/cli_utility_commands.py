"""Utility CLI commands - mounts, version."""
import typer
from rich.console import Console
from rich.table import Table

from iobench import __version__
from iobench.cli_support import handle_cli_error
from iobench.core.config import load_config
from iobench.core.errors import IOBenchError
from iobench.discovery import MountDiscovery

# Module-level console instance (will be set by register function)
console: Console = Console()


def mounts(
    show_all: bool = typer.Option(False, "--all", "-a", help="Include pseudo filesystems"),
):
    """List mounts iobench would benchmark and the disks behind them."""
    try:
        cfg = load_config()
        discovery = MountDiscovery(excluded_fs_types=cfg.excluded_fs_types)
        entries = discovery.list_mounts() if show_all else discovery.list_real_mounts()
    except (IOBenchError, OSError) as e:
        handle_cli_error(e, console)

    if not entries:
        console.print("[yellow]No mounts found[/yellow]")
        return

    table = Table(title="Mounts", show_header=True)
    table.add_column("Mount", style="cyan")
    table.add_column("Device")
    table.add_column("Disk", style="blue")
    table.add_column("FS")
    table.add_column("Model")

    for entry in entries:
        record = discovery.to_record(entry)
        table.add_row(
            record.mount_path,
            record.device,
            record.backing_disk,
            record.filesystem_type,
            record.model,
        )

    console.print(table)


def version():
    """Show iobench version."""
    console.print(f"iobench {__version__}")


def register_utility_commands(app: typer.Typer, shared_console: Console) -> None:
    """Attach utility commands to the root CLI."""
    global console
    console = shared_console
    app.command()(mounts)
    app.command()(version)
