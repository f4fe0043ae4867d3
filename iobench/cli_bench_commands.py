"""Benchmark commands - run, quick."""
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from iobench.cli_support import (
    ensure_root,
    handle_cli_error,
    load_cli_config,
    print_success,
    print_warning,
    setup_file_logging,
)
from iobench.core.errors import IOBenchError
from iobench.core.suite import BenchmarkSuite
from iobench.discovery import MountDiscovery
from iobench.report import build_table, render_json, render_lines

# Module-level console instance (will be set by register function)
console: Console = Console()


def run(
    paths: Optional[List[str]] = typer.Argument(
        None, help="Directories to benchmark (default: every real mount)"
    ),
    repeat: Optional[int] = typer.Option(None, "--repeat", "-n", help="Runs averaged per mount"),
    jobs: Optional[int] = typer.Option(None, "--jobs", "-j", help="Mounts benchmarked in parallel"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Seconds before a fio run is killed"),
    json_output: bool = typer.Option(False, "--json", help="Print results as JSON"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="YAML config file"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Log file path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log raw tool output"),
):
    """Sequential and random read/write throughput of each mount (fio).

    Examples:
        iobench run                 # Every real mount
        iobench run /srv /data -n 3 # Selected directories, 3 runs each
        iobench run --json          # Machine-readable output
    """
    try:
        ensure_root()
        cfg = load_cli_config(config, repeat=repeat, jobs=jobs, command_timeout=timeout)
        setup_file_logging(log_file, verbose)

        discovery = MountDiscovery(excluded_fs_types=cfg.excluded_fs_types)
        if paths:
            records = [discovery.resolve(path) for path in paths]
        else:
            records = discovery.discover()

        if not records:
            print_warning(console, "No benchmarkable mounts found")
            raise typer.Exit(1)

        results = BenchmarkSuite(config=cfg).run_all(records)
    except (IOBenchError, OSError) as e:
        handle_cli_error(e, console, verbose)

    if json_output:
        typer.echo(render_json(results))
    else:
        console.print(build_table(results))


def quick(
    path: Optional[str] = typer.Argument(
        None, help="Directory to test (default: a temporary /tmp/io_test)"
    ),
    repeat: Optional[int] = typer.Option(None, "--repeat", "-n", help="Runs to average"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Seconds before dd/fio is killed"),
    json_output: bool = typer.Option(False, "--json", help="Print results as JSON"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="YAML config file"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Log file path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log raw tool output"),
):
    """dd write/read plus a fio random read/write mix on one directory."""
    try:
        ensure_root()
        cfg = load_cli_config(config, repeat=repeat, command_timeout=timeout)
        setup_file_logging(log_file, verbose)

        target = Path(path or cfg.quick_dir)
        summary = BenchmarkSuite(config=cfg).run_quick(target, create_target=path is None)
    except (IOBenchError, OSError) as e:
        handle_cli_error(e, console, verbose)

    if json_output:
        typer.echo(render_json(summary))
        return

    for line in render_lines(summary):
        console.print(line, highlight=False)
    print_success(console, "Test files cleaned up")


def register_bench_commands(app: typer.Typer, shared_console: Console) -> None:
    """Attach benchmark commands to the root CLI."""
    global console
    console = shared_console
    app.command()(run)
    app.command()(quick)
