"""Benchmark result models."""
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class Tool(Enum):
    """External benchmarking binary."""
    DD = "dd"
    FIO = "fio"


class Direction(Enum):
    """I/O access pattern."""
    READ = "read"
    WRITE = "write"
    RANDREAD = "randread"
    RANDWRITE = "randwrite"


@dataclass(frozen=True)
class SpeedSample:
    """A number and its unit token as found in tool output."""
    value: float
    unit: str     # kB/s, MiB/s, GB/s ...


@dataclass
class BenchmarkRun:
    """One dd/fio measurement against a mount."""
    tool: Tool
    direction: Direction
    mount: str
    raw_output: str = ""
    speed: Optional[float] = None   # MB/s, None when unavailable
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.speed is not None


@dataclass(frozen=True)
class MountEntry:
    """A mounted filesystem as listed by the kernel."""
    device: str
    fs_type: str
    mount_path: str


@dataclass
class MountRecord:
    """Per-mount benchmark summary; speeds in MB/s."""
    mount_path: str
    device: str
    backing_disk: str
    filesystem_type: str
    model: str = "Unknown"
    seq_write: Optional[float] = None
    seq_read: Optional[float] = None
    rand_write: Optional[float] = None
    rand_read: Optional[float] = None
    runs: List[BenchmarkRun] = field(default_factory=list)

    def speeds(self) -> Dict[str, Optional[float]]:
        return {
            "seq_write": self.seq_write,
            "seq_read": self.seq_read,
            "rand_write": self.rand_write,
            "rand_read": self.rand_read,
        }

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data.pop("runs")
        data["errors"] = list(dict.fromkeys(run.error for run in self.runs if run.error))
        return data


@dataclass
class QuickSummary:
    """Averages of the single-target dd + fio test."""
    target: str
    runs: int
    dd_write: Optional[float] = None
    dd_read: Optional[float] = None
    fio_write: Optional[float] = None
    fio_read: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
