"""Exception hierarchy for iobench.

Fatal conditions (``PrivilegeError``, ``ToolMissingError``, ``LockError``,
``ConfigError``) abort the run from the CLI. The remaining errors are raised
per measurement and turned into an unavailable result by the benchmark suite.
"""
from typing import Optional, Sequence


class IOBenchError(Exception):
    """Base class for all iobench errors."""
    pass


class PrivilegeError(IOBenchError):
    """Raised when a benchmark is started without root privileges."""
    pass


class ConfigError(IOBenchError):
    """Raised for unreadable or invalid configuration."""
    pass


class ToolMissingError(IOBenchError):
    """Raised when a required external binary is not on PATH."""

    def __init__(self, tool: str):
        super().__init__(
            f"Required tool '{tool}' not found in PATH. Install it and re-run iobench."
        )
        self.tool = tool


class ToolExecutionError(IOBenchError):
    """Raised when dd/fio exits non-zero."""

    def __init__(
        self,
        args: Sequence[str],
        returncode: Optional[int],
        output: str = "",
        message: Optional[str] = None,
    ):
        self.command = list(args)
        self.returncode = returncode
        self.output = output
        super().__init__(
            message or f"{self.command[0]} exited with status {returncode}"
        )


class ToolTimeoutError(ToolExecutionError):
    """Raised when dd/fio runs past its wall-clock timeout and is killed."""

    def __init__(self, args: Sequence[str], timeout: float, output: str = ""):
        self.timeout = timeout
        super().__init__(
            args,
            None,
            output,
            message=f"{args[0]} killed after {timeout:g}s timeout",
        )


class SpeedParseError(IOBenchError):
    """Raised when tool output carries no recognizable bandwidth figure."""

    def __init__(self, source: str, text: str):
        self.source = source
        self.text = text
        super().__init__(f"No bandwidth figure found in {source} output")


class AggregationError(IOBenchError):
    """Raised when a set of samples has no valid numeric entries."""
    pass
