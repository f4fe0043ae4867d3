"""Shared utilities for iobench CLI modules."""
from __future__ import annotations

import os
from typing import Any, Optional

import typer
from rich.console import Console
from rich.markup import escape

from iobench.core.config import BenchConfig, load_config, set_config
from iobench.core.errors import PrivilegeError


def ensure_root() -> None:
    """Raise PrivilegeError unless running as root.

    Direct I/O against arbitrary mounts needs root; failing here beats
    failing deep inside a dd/fio call.
    """
    if os.geteuid() != 0:
        raise PrivilegeError("iobench must be run as root (try: sudo iobench ...)")


def load_cli_config(config_path: Optional[str] = None, **overrides: Any) -> BenchConfig:
    """Load config from env/YAML, apply CLI flag overrides and make it global.

    Args:
        config_path: Explicit YAML file (optional)
        **overrides: BenchConfig fields from CLI flags; None means not given
    """
    config = load_config(config_path).merged(overrides)
    set_config(config)
    return config


def setup_file_logging(log_file: Optional[str] = None, verbose: bool = False) -> None:
    """Set up file logging for CLI commands.

    Args:
        log_file: Path to log file (optional)
        verbose: Enable verbose logging
    """
    from iobench.core.logger import setup_file_logging as _setup_file_logging
    _setup_file_logging(log_file=log_file, verbose=verbose)


def handle_cli_error(
    e: Exception,
    console: Console,
    verbose: bool = False,
    exit_code: int = 1
) -> None:
    """Print a one-line error and exit.

    Args:
        e: Exception to handle
        console: Rich console for output
        verbose: Show exception traceback if True
        exit_code: Exit code to use
    """
    console.print(f"[red]Error:[/red] {escape(str(e))}")
    if verbose:
        console.print_exception()
    raise typer.Exit(exit_code)


def print_success(console: Console, message: str, prefix: str = "✓") -> None:
    """Print success message with consistent formatting."""
    console.print(f"[green]{prefix}[/green] {message}")


def print_warning(console: Console, message: str, prefix: str = "⚠") -> None:
    """Print warning message with consistent formatting."""
    console.print(f"[yellow]{prefix}[/yellow] {message}")
