"""
Percentile statistics over Short-term loudness: loudness range and dynamic range.
"""
import math
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np


LRA_GATE_LU = 20.0
LRA_LOW_PERCENTILE = 10.0
LRA_HIGH_PERCENTILE = 95.0
DR_LOW_PERCENTILE = 5.0
DR_HIGH_PERCENTILE = 95.0


@dataclass(frozen=True)
class RangeResult:
    lra: float
    low: float
    high: float
    threshold: float


@dataclass(frozen=True)
class DynamicRangeResult:
    dr: float
    low: float
    high: float


def percentile(sorted_values: Sequence[float], p: float) -> float:
    """
    Percentile of an ascending sequence with linear interpolation between
    order statistics at position p/100 * (n - 1).
    """
    n = len(sorted_values)
    if n == 0:
        return float("nan")
    if p <= 0:
        return float(sorted_values[0])
    if p >= 100:
        return float(sorted_values[n - 1])

    pos = (p / 100.0) * (n - 1)
    lo = int(math.floor(pos))
    hi = int(math.ceil(pos))
    frac = pos - lo
    low_value = float(sorted_values[lo])
    return low_value + (float(sorted_values[hi]) - low_value) * frac


def _finite_sorted(values: np.ndarray) -> np.ndarray:
    values = np.asarray(values, dtype=np.float64)
    return np.sort(values[np.isfinite(values)])


def loudness_range(
    short_term: np.ndarray,
    integrated: float,
    gate_offset: float = LRA_GATE_LU,
    low: float = LRA_LOW_PERCENTILE,
    high: float = LRA_HIGH_PERCENTILE,
) -> RangeResult:
    """
    Spread between the high and low percentiles of gated Short-term loudness.

    Blocks quieter than integrated - gate_offset are dropped; if that leaves
    nothing, every finite block is used instead. A non-finite integrated
    loudness gives an LRA of 0.
    """
    threshold = integrated - gate_offset
    finite = _finite_sorted(short_term)
    if not math.isfinite(integrated) or finite.size == 0:
        return RangeResult(lra=0.0, low=float("nan"), high=float("nan"), threshold=threshold)

    gated = finite[finite >= threshold]
    base = gated if gated.size else finite

    p_low = percentile(base, low)
    p_high = percentile(base, high)
    return RangeResult(lra=p_high - p_low, low=p_low, high=p_high, threshold=threshold)


def dynamic_range(
    short_term: np.ndarray,
    low: float = DR_LOW_PERCENTILE,
    high: float = DR_HIGH_PERCENTILE,
) -> DynamicRangeResult:
    """Ungated P95 - P5 spread of finite Short-term loudness."""
    finite = _finite_sorted(short_term)
    if finite.size == 0:
        return DynamicRangeResult(dr=0.0, low=float("nan"), high=float("nan"))

    p_low = percentile(finite, low)
    p_high = percentile(finite, high)
    return DynamicRangeResult(dr=p_high - p_low, low=p_low, high=p_high)


def max_with_index(values: Sequence[float]) -> Tuple[float, int]:
    """Return (max, index) of the first maximum; (-inf, -1) for empty input."""
    values = np.asarray(values, dtype=np.float64)
    if values.size == 0:
        return float("-inf"), -1
    index = int(np.argmax(values))
    return float(values[index]), index
