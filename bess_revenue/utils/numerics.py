"""
Numeric Helpers
ERCOT BESS Revenue Engine

Small statistics used by both optimizers. Empty inputs return 0.0 rather
than NaN so that revenue summaries stay plain floats.
"""

import math
from typing import Sequence

import numpy as np


def clamp(value: float, lower: float, upper: float) -> float:
    """Limit value to the closed range [lower, upper]."""
    return max(lower, min(upper, value))


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean, 0.0 for an empty sequence."""
    if len(values) == 0:
        return 0.0
    return float(np.mean(values))


def median(values: Sequence[float]) -> float:
    """Median (average of the middle pair for even lengths), 0.0 if empty."""
    if len(values) == 0:
        return 0.0
    return float(np.median(values))


def percentile(values: Sequence[float], p: float) -> float:
    """
    Nearest-rank percentile without interpolation.

    Picks the sorted element at index floor(p/100 * (n - 1)), so the result
    is always one of the observed values.

    Parameters
    ----------
    values : sequence of float
        Observations
    p : float
        Percentile in [0, 100]

    Returns
    -------
    float
        Selected observation, or 0.0 for an empty sequence
    """
    if len(values) == 0:
        return 0.0
    ordered = np.sort(np.asarray(values, dtype=float))
    idx = int(math.floor((p / 100) * (len(ordered) - 1)))
    return float(ordered[idx])


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3)."""
    return int(math.floor(value + 0.5))
