"""Bandwidth string parsing.

dd and fio print throughput in several spellings (``96.9 MB/s``,
``302kB/s``, ``bw=31.6MiB/s (33.1MB/s)``, ``(1.2GiB/s)``). Everything is
normalized onto a single MB/s scale where decimal and binary prefixes are
treated alike, so ``kB/s`` and ``KiB/s`` both divide by 1024.
"""
import re
from typing import Optional

from iobench.core.errors import SpeedParseError
from iobench.models.bench import SpeedSample

# Multiplier from each unit token to MB/s
UNIT_FACTORS = {
    "kB/s": 1 / 1024,
    "KB/s": 1 / 1024,
    "KiB/s": 1 / 1024,
    "MB/s": 1.0,
    "MiB/s": 1.0,
    "GB/s": 1024.0,
    "GiB/s": 1024.0,
    "TB/s": 1024.0 * 1024,
    "TiB/s": 1024.0 * 1024,
}

# Longest tokens first so "KiB/s" is not shadowed by a shorter alternative
_UNIT_PATTERN = "|".join(
    re.escape(unit) for unit in sorted(UNIT_FACTORS, key=len, reverse=True)
)
_SPEED_RE = re.compile(rf"(\d+(?:\.\d+)?|\.\d+)\s*({_UNIT_PATTERN})")


def parse_sample(text: Optional[str]) -> Optional[SpeedSample]:
    """Return the first ``<number> <unit>`` pair in ``text``, or None."""
    if not text:
        return None
    match = _SPEED_RE.search(text)
    if not match:
        return None
    return SpeedSample(value=float(match.group(1)), unit=match.group(2))


def normalize(sample: SpeedSample) -> float:
    """Convert a sample to MB/s.

    Raises:
        KeyError: If the unit is not one of UNIT_FACTORS
    """
    factor = UNIT_FACTORS[sample.unit]
    if factor == 1.0:
        return sample.value
    return sample.value * factor


def parse_speed(text: Optional[str]) -> Optional[float]:
    """Parse a bandwidth fragment into MB/s.

    Returns None when no number with a recognized unit is present; never
    raises. A measured zero comes back as ``0.0``, so the two cases stay
    distinguishable.
    """
    sample = parse_sample(text)
    if sample is None:
        return None
    return normalize(sample)


def require_speed(text: Optional[str], source: str) -> float:
    """Like parse_speed, but raise SpeedParseError when nothing is found."""
    speed = parse_speed(text)
    if speed is None:
        raise SpeedParseError(source, text or "")
    return speed


def format_speed(speed: Optional[float], missing: str = "N/A") -> str:
    """Render MB/s with two decimals, or ``missing`` for no data."""
    if speed is None:
        return missing
    return f"{speed:.2f}"
