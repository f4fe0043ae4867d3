"""Averaging of repeated measurements."""
import math
import re
from typing import Any, Iterable, List, Optional

from iobench.core.errors import AggregationError
from iobench.core.logger import get_logger

logger = get_logger(__name__)

_NUMERIC_RE = re.compile(r"^\d+(?:\.\d+)?$|^\.\d+$")


def valid_samples(samples: Iterable[Any]) -> List[float]:
    """Keep finite, non-negative numbers and numeric strings; drop the rest."""
    kept = []
    for sample in samples:
        if isinstance(sample, bool) or sample is None:
            continue
        if isinstance(sample, str):
            text = sample.strip()
            if not _NUMERIC_RE.match(text):
                continue
            sample = float(text)
        if not isinstance(sample, (int, float)):
            continue
        if not math.isfinite(sample) or sample < 0:
            continue
        kept.append(float(sample))
    return kept


def mean(samples: Iterable[Any]) -> float:
    """Arithmetic mean of the valid samples.

    Raises:
        AggregationError: If no sample survives the filter
    """
    values = valid_samples(samples)
    if not values:
        raise AggregationError("no valid samples")
    return math.fsum(values) / len(values)


def aggregate(samples: Iterable[Any]) -> Optional[float]:
    """Mean of the valid samples, or None when there is no data."""
    samples = list(samples)
    try:
        return mean(samples)
    except AggregationError:
        logger.debug(f"No valid samples among {len(samples)} measurement(s)")
        return None
