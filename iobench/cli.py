#!/usr/bin/env python3
"""iobench CLI - storage throughput benchmarks driven by dd and fio."""

import typer
from rich.console import Console

from iobench.cli_bench_commands import register_bench_commands
from iobench.cli_utility_commands import register_utility_commands

app = typer.Typer(
    name="iobench",
    help="""iobench - Storage throughput benchmarks with dd and fio

Quick start:
  iobench mounts          # See which mounts will be tested
  sudo iobench run        # fio on every real mount
  sudo iobench quick      # dd + fio on /tmp/io_test
""",
    add_completion=False,
)

console = Console()

register_bench_commands(app, console)
register_utility_commands(app, console)

if __name__ == "__main__":
    app()
