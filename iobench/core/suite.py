"""Repeated benchmark runs and their per-mount summaries."""
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional

from iobench.core.aggregate import aggregate
from iobench.core.config import BenchConfig, get_config
from iobench.core.errors import SpeedParseError, ToolExecutionError
from iobench.core.logger import get_logger
from iobench.core.parsers import extract_dd_speed, parse_fio_json, parse_fio_text
from iobench.core.runner import FIO_JOBS, ToolRunner
from iobench.core.scratch import scratch_dir
from iobench.models.bench import (
    BenchmarkRun,
    Direction,
    MountRecord,
    QuickSummary,
    Tool,
)

logger = get_logger(__name__)

# fio job name -> MountRecord attribute is the same string
JOB_DIRECTIONS = {name: Direction(rw) for name, rw in FIO_JOBS}
OUTPUT_TAIL_LINES = 20


def _tail(output: str, lines: int = OUTPUT_TAIL_LINES) -> str:
    return "\n".join((output or "").splitlines()[-lines:])


class BenchmarkSuite:
    """Runs dd/fio benchmarks and averages them per target."""

    def __init__(self, runner: Optional[ToolRunner] = None, config: Optional[BenchConfig] = None):
        self.config = config or get_config()
        self.runner = runner or ToolRunner(self.config)

    # -----------------------------
    #  Multi-mount fio benchmark
    # -----------------------------
    def run_all(self, records: List[MountRecord], jobs: Optional[int] = None) -> List[MountRecord]:
        """Benchmark every mount; results keep the input order.

        Raises:
            ToolMissingError: If fio is not installed
            LockError: If another iobench run holds one of the mounts
        """
        self.runner.require("fio")
        jobs = jobs or self.config.jobs
        if jobs <= 1 or len(records) <= 1:
            return [self.run_mount(record) for record in records]

        with ThreadPoolExecutor(max_workers=jobs) as executor:
            return list(executor.map(self.run_mount, records))

    def run_mount(self, record: MountRecord) -> MountRecord:
        """Run the four fio jobs ``repeat`` times and fill in the averages."""
        repeat = self.config.repeat
        logger.info(f"Benchmarking {record.mount_path} ({record.backing_disk}, {repeat} run(s))")

        try:
            with scratch_dir(Path(record.mount_path)) as scratch:
                for iteration in range(1, repeat + 1):
                    record.runs.extend(self._fio_once(record.mount_path, scratch, iteration))
        except OSError as e:
            # Read-only or vanished mount: report N/A and move on
            logger.warning(f"Skipping {record.mount_path}: {e}")
            record.runs.append(BenchmarkRun(
                tool=Tool.FIO,
                direction=Direction.WRITE,
                mount=record.mount_path,
                error=str(e),
            ))

        for name, direction in JOB_DIRECTIONS.items():
            samples = [run.speed for run in record.runs if run.direction == direction]
            setattr(record, name, aggregate(samples))

        return record

    def _fio_once(self, mount: str, scratch: Path, iteration: int) -> List[BenchmarkRun]:
        output = ""
        error = None
        speeds = {name: None for name in JOB_DIRECTIONS}
        try:
            result = self.runner.run_fio(scratch)
            output = result.output
            logger.debug(f"fio output (run {iteration}, {mount}):\n{output}")
            result.check()
            speeds = parse_fio_json(result.stdout)
        except (ToolExecutionError, SpeedParseError) as e:
            output = output or getattr(e, "output", "") or getattr(e, "text", "")
            error = str(e)
            logger.warning(f"fio run {iteration} on {mount} failed: {e}\n{_tail(output)}")

        runs = []
        for name, direction in JOB_DIRECTIONS.items():
            speed = speeds.get(name)
            runs.append(BenchmarkRun(
                tool=Tool.FIO,
                direction=direction,
                mount=mount,
                raw_output=output,
                speed=speed,
                error=error or (None if speed is not None else f"fio job {name} reported no bandwidth"),
            ))
        return runs

    # -----------------------------
    #  Single-target dd + fio test
    # -----------------------------
    def run_quick(self, target: Path, create_target: bool = False) -> QuickSummary:
        """dd write/read and a fio random read/write mix, ``repeat`` times.

        Raises:
            ToolMissingError: If dd or fio is not installed
            LockError: If another iobench run holds the target
        """
        self.runner.require("dd", "fio")
        repeat = self.config.repeat
        mount = str(target)
        runs: List[BenchmarkRun] = []

        with scratch_dir(Path(target), create_target=create_target) as scratch:
            test_file = scratch / "testfile"
            for iteration in range(1, repeat + 1):
                logger.info(f"Starting run {iteration}/{repeat} on {mount}")
                runs.append(self._dd_once(Direction.WRITE, test_file, mount))
                runs.append(self._dd_once(Direction.READ, test_file, mount))
                runs.extend(self._fio_mixed_once(test_file, mount))

        def average(tool: Tool, direction: Direction) -> Optional[float]:
            return aggregate(
                run.speed for run in runs if run.tool == tool and run.direction == direction
            )

        return QuickSummary(
            target=mount,
            runs=repeat,
            dd_write=average(Tool.DD, Direction.WRITE),
            dd_read=average(Tool.DD, Direction.READ),
            fio_write=average(Tool.FIO, Direction.RANDWRITE),
            fio_read=average(Tool.FIO, Direction.RANDREAD),
        )

    def _dd_once(self, direction: Direction, test_file: Path, mount: str) -> BenchmarkRun:
        run = BenchmarkRun(tool=Tool.DD, direction=direction, mount=mount)
        try:
            result = self.runner.run_dd(direction, test_file)
            run.raw_output = result.output
            logger.debug(f"dd {direction.value} output:\n{run.raw_output}")
            result.check()
            run.speed = extract_dd_speed(result.output)
            logger.info(f"dd {direction.value}: {run.speed:.2f} MB/s")
        except (ToolExecutionError, SpeedParseError) as e:
            run.error = str(e)
            logger.warning(f"dd {direction.value} on {mount} failed: {e}\n{_tail(run.raw_output)}")
        return run

    def _fio_mixed_once(self, test_file: Path, mount: str) -> List[BenchmarkRun]:
        read_run = BenchmarkRun(tool=Tool.FIO, direction=Direction.RANDREAD, mount=mount)
        write_run = BenchmarkRun(tool=Tool.FIO, direction=Direction.RANDWRITE, mount=mount)
        try:
            result = self.runner.run_fio_mixed(test_file)
            output = result.output
            read_run.raw_output = write_run.raw_output = output
            logger.debug(f"fio randrw output:\n{output}")
            result.check()
            read_run.speed, write_run.speed = parse_fio_text(result.stdout)
        except ToolExecutionError as e:
            read_run.error = write_run.error = str(e)
            logger.warning(f"fio randrw on {mount} failed: {e}\n{_tail(read_run.raw_output)}")
            return [read_run, write_run]

        for run in (read_run, write_run):
            if run.speed is None:
                run.error = f"no {run.direction.value} bandwidth in fio output"
                logger.warning(f"fio {run.direction.value} on {mount}: {run.error}")
            else:
                logger.info(f"fio {run.direction.value}: {run.speed:.2f} MB/s")
        return [read_run, write_run]
