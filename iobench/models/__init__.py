"""Data models for iobench."""
from iobench.models.bench import (
    BenchmarkRun,
    Direction,
    MountEntry,
    MountRecord,
    QuickSummary,
    SpeedSample,
    Tool,
)

__all__ = [
    'BenchmarkRun',
    'Direction',
    'MountEntry',
    'MountRecord',
    'QuickSummary',
    'SpeedSample',
    'Tool',
]
