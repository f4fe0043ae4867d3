"""Rendering of benchmark results as a table, log lines or JSON."""
import io
import json
from typing import List, Sequence, Union

from rich.console import Console
from rich.table import Table

from iobench.core.speed import format_speed
from iobench.models.bench import MountRecord, QuickSummary

MISSING = "N/A"


def build_table(records: Sequence[MountRecord]) -> Table:
    """Rich table with one row per mount; speeds in MB/s."""
    table = Table(title="Storage throughput (MB/s)", show_header=True)
    table.add_column("Mount", style="cyan")
    table.add_column("Disk")
    table.add_column("Model", style="blue")
    table.add_column("FS")
    for column in ("SeqW", "SeqR", "RandW", "RandR"):
        table.add_column(column, justify="right", style="green")

    for record in records:
        table.add_row(
            record.mount_path,
            record.backing_disk,
            record.model,
            record.filesystem_type,
            *(format_speed(speed, MISSING) for speed in record.speeds().values()),
        )
    return table


def render_table(records: Sequence[MountRecord], width: int = 140) -> str:
    """Plain-text rendering of build_table()."""
    buffer = io.StringIO()
    console = Console(file=buffer, width=width, color_system=None, highlight=False)
    console.print(build_table(records))
    return buffer.getvalue()


def render_lines(summary: QuickSummary) -> List[str]:
    """Flat summary lines for the single-target test."""
    return [
        f"Test results for {summary.target} (average of {summary.runs} run(s)):",
        f"DD write speed average: {format_speed(summary.dd_write, MISSING)} MB/s",
        f"DD read speed average: {format_speed(summary.dd_read, MISSING)} MB/s",
        f"FIO random write speed average: {format_speed(summary.fio_write, MISSING)} MB/s",
        f"FIO random read speed average: {format_speed(summary.fio_read, MISSING)} MB/s",
    ]


def render_json(results: Union[QuickSummary, Sequence[MountRecord]]) -> str:
    """JSON document; unavailable speeds are null."""
    if isinstance(results, QuickSummary):
        payload = results.to_dict()
    else:
        payload = {"unit": "MB/s", "mounts": [record.to_dict() for record in results]}
    return json.dumps(payload, indent=2)
