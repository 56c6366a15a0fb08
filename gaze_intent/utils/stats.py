"""
Small robust-statistics helpers shared by calibration and classification.
"""

import math
from typing import Iterable, Optional, Sequence

import numpy as np


def median(values: Sequence[float]) -> float:
    """Median of values, 0.0 for an empty sequence"""
    if len(values) == 0:
        return 0.0
    return float(np.median(np.asarray(values, dtype=float)))


def mad(values: Sequence[float], center: Optional[float] = None) -> float:
    """
    Median absolute deviation around center (the median when not given).

    Returns 0.0 for an empty sequence.
    """
    if len(values) == 0:
        return 0.0
    arr = np.asarray(values, dtype=float)
    c = median(arr) if center is None else center
    return float(np.median(np.abs(arr - c)))


def clamp(value: float, min_value: float, max_value: float) -> float:
    return min(max_value, max(min_value, value))


def population_stddev(values: Sequence[float]) -> float:
    """Standard deviation dividing by N; 0.0 for fewer than two values"""
    if len(values) < 2:
        return 0.0
    return float(np.std(np.asarray(values, dtype=float)))


def all_finite(values: Iterable[float]) -> bool:
    return all(math.isfinite(v) for v in values)
