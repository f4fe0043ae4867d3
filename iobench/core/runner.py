"""Subprocess wrapper around the dd and fio binaries."""
import os
import shutil
import signal
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from iobench.core.config import BenchConfig, get_config
from iobench.core.errors import ToolExecutionError, ToolMissingError, ToolTimeoutError
from iobench.core.logger import get_logger
from iobench.models.bench import Direction

logger = get_logger(__name__)

# Seconds to collect output after the process group was killed
KILL_GRACE = 5.0

# (job name, fio rw mode), in execution order
FIO_JOBS: List[Tuple[str, str]] = [
    ("seq_write", "write"),
    ("seq_read", "read"),
    ("rand_write", "randwrite"),
    ("rand_read", "randread"),
]


@dataclass
class CommandResult:
    """Captured output of one external command."""
    args: List[str]
    stdout: str
    stderr: str
    returncode: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """stdout and stderr joined; dd prints its summary on stderr."""
        return "\n".join(part for part in (self.stdout, self.stderr) if part)

    def check(self) -> "CommandResult":
        """Raise ToolExecutionError unless the command exited 0."""
        if not self.ok:
            raise ToolExecutionError(self.args, self.returncode, self.output)
        return self


def _decode(data) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode(errors="replace")
    return data


def _kill_process_group(proc: subprocess.Popen) -> None:
    """SIGKILL the session leader and every process it forked."""
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass


class ToolRunner:
    """Runs dd/fio with fixed arguments and a hard timeout."""

    def __init__(self, config: Optional[BenchConfig] = None):
        self.config = config or get_config()

    def require(self, *tools: str) -> None:
        """Ensure every tool is on PATH.

        Raises:
            ToolMissingError: For the first missing tool
        """
        for tool in tools:
            if shutil.which(tool) is None:
                raise ToolMissingError(tool)

    def run(self, args: Sequence[str], timeout: Optional[float] = None) -> CommandResult:
        """Run a command to completion and capture its output.

        A non-zero exit is returned, not raised; call ``check()`` on the
        result for that. The child runs in its own session so that on
        timeout the whole process group is killed, including fio workers.

        Raises:
            ToolMissingError: If the binary does not exist
            ToolTimeoutError: If the command ran past its timeout
        """
        args = [str(a) for a in args]
        timeout = timeout if timeout is not None else self.config.command_timeout
        # C locale keeps a '.' decimal separator in dd's summary line
        env = {**os.environ, "LC_ALL": "C"}

        logger.debug(f"Executing command: {' '.join(args)}")
        try:
            proc = subprocess.Popen(
                args,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                env=env,
                start_new_session=True,
            )
        except FileNotFoundError as e:
            raise ToolMissingError(args[0]) from e

        try:
            stdout, stderr = proc.communicate(timeout=timeout)
        except subprocess.TimeoutExpired as e:
            _kill_process_group(proc)
            try:
                stdout, stderr = proc.communicate(timeout=KILL_GRACE)
            except subprocess.TimeoutExpired:
                # A descendant left the group and still holds the pipes
                stdout, stderr = e.stdout, e.stderr
                proc.wait()
            output = "\n".join(p for p in (_decode(stdout), _decode(stderr)) if p)
            raise ToolTimeoutError(args, timeout, output) from e
        except BaseException:
            _kill_process_group(proc)
            proc.wait()
            raise

        logger.debug(f"{args[0]} exited {proc.returncode}")
        return CommandResult(
            args=args,
            stdout=stdout or "",
            stderr=stderr or "",
            returncode=proc.returncode,
        )

    def run_dd(
        self,
        direction: Direction,
        file: Path,
        block_size: Optional[str] = None,
        count: Optional[int] = None,
    ) -> CommandResult:
        """Sequential dd write or read with direct I/O."""
        block_size = block_size or self.config.dd_block_size
        count = count or self.config.dd_count

        if direction == Direction.WRITE:
            args = ["dd", "if=/dev/zero", f"of={file}", f"bs={block_size}", f"count={count}", "oflag=direct"]
        elif direction == Direction.READ:
            args = ["dd", f"if={file}", "of=/dev/null", f"bs={block_size}", f"count={count}", "iflag=direct"]
        else:
            raise ValueError(f"dd only supports sequential read/write, not {direction.value}")

        return self.run(args)

    def fio_args(self, scratch_dir: Path) -> List[str]:
        """Argument list for the four stonewalled fio jobs, one file each."""
        cfg = self.config
        args = [
            "fio",
            "--output-format=json",
            "--direct=1",
            f"--ioengine={cfg.fio_ioengine}",
            f"--bs={cfg.fio_block_size}",
            f"--iodepth={cfg.fio_iodepth}",
            f"--size={cfg.fio_size}",
        ]
        for name, rw in FIO_JOBS:
            args += [
                f"--name={name}",
                f"--rw={rw}",
                f"--filename={Path(scratch_dir) / f'{name}.dat'}",
                "--stonewall",
            ]
        return args

    def run_fio(self, scratch_dir: Path) -> CommandResult:
        """Run the sequential/random read/write job set with JSON output."""
        return self.run(self.fio_args(scratch_dir))

    def run_fio_mixed(self, file: Path) -> CommandResult:
        """Run a time-based 4k random read/write mix with normal text output."""
        cfg = self.config
        args = [
            "fio",
            "--name=io_test",
            f"--size={cfg.fio_size}",
            f"--filename={file}",
            "--rw=randrw",
            f"--bs={cfg.fio_block_size}",
            "--direct=1",
            f"--numjobs={cfg.mixed_numjobs}",
            "--time_based",
            f"--runtime={cfg.mixed_runtime}",
            "--group_reporting",
        ]
        return self.run(args)
