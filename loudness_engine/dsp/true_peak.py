"""
True-peak estimation by Catmull-Rom oversampling between samples.
"""
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from loudness_engine.exceptions import InvalidInputError


DEFAULT_OVERSAMPLE = 4
# Intervals evaluated per pass; bounds the temporaries for long channels.
_CHUNK_INTERVALS = 1 << 16


@dataclass(frozen=True)
class PeakResult:
    peak: float
    db: float

    @classmethod
    def from_linear(cls, peak: float) -> 'PeakResult':
        peak = float(peak)
        return cls(peak=peak, db=20.0 * math.log10(peak) if peak > 0 else float("-inf"))


def _interpolated_peak(x: np.ndarray, oversample: int) -> float:
    """Largest |y| at fractional offsets k/oversample between consecutive samples."""
    n = x.shape[0]
    if n < 2 or oversample < 2:
        return 0.0

    # Edge replication: the sample before the first and after the last
    padded = np.concatenate([x[:1], x, x[-1:]])
    offsets = [k / float(oversample) for k in range(1, oversample)]
    peak = 0.0

    for start in range(0, n - 1, _CHUNK_INTERVALS):
        stop = min(start + _CHUNK_INTERVALS, n - 1)
        s0 = padded[start:stop]
        s1 = padded[start + 1:stop + 1]
        s2 = padded[start + 2:stop + 2]
        s3 = padded[start + 3:stop + 3]

        a = 2 * s1
        b = s2 - s0
        c = 2 * s0 - 5 * s1 + 4 * s2 - s3
        d = -s0 + 3 * s1 - 3 * s2 + s3
        for t in offsets:
            y = 0.5 * (a + t * (b + t * (c + t * d)))
            peak = max(peak, float(np.max(np.abs(y))))

    return peak


def true_peak_linear(channels: np.ndarray, oversample: int = DEFAULT_OVERSAMPLE) -> float:
    """Maximum absolute amplitude over all channels, original and interpolated positions."""
    data = np.asarray(channels, dtype=np.float64)
    if data.ndim == 1:
        data = data.reshape(1, -1)

    peak = 0.0
    for x in data:
        if x.size == 0:
            continue
        peak = max(peak, float(np.max(np.abs(x))), _interpolated_peak(x, int(oversample)))
    return peak


def true_peak(channels: np.ndarray, oversample: int = DEFAULT_OVERSAMPLE) -> PeakResult:
    """
    Estimate the true peak of (channels, samples) data.

    Args:
        channels: Samples shaped (channels, samples); 1-D input is mono
        oversample: Oversampling factor (4 evaluates t = 0.25, 0.5, 0.75)

    Returns:
        PeakResult with the linear peak and its level in dB (-inf when silent)
    """
    return PeakResult.from_linear(true_peak_linear(channels, oversample))


class TruePeakTracker:
    """
    Running true peak over consecutive blocks of a stream.

    The last three samples of each channel are carried into the next block, so
    every interval is evaluated at least once with its real neighbours.
    """

    def __init__(self, oversample: int = DEFAULT_OVERSAMPLE):
        self.oversample = int(oversample)
        self.peak = 0.0
        self._tail: Optional[np.ndarray] = None

    @property
    def result(self) -> PeakResult:
        return PeakResult.from_linear(self.peak)

    def update(self, block: np.ndarray) -> PeakResult:
        block = np.asarray(block, dtype=np.float64)
        if block.ndim == 1:
            block = block.reshape(1, -1)
        if block.shape[1] == 0:
            return self.result

        if self._tail is None:
            joined = block
        elif self._tail.shape[0] != block.shape[0]:
            raise InvalidInputError(
                f"Block has {block.shape[0]} channels, tracker expects {self._tail.shape[0]}"
            )
        else:
            joined = np.concatenate([self._tail, block], axis=1)

        self.peak = max(self.peak, true_peak_linear(joined, self.oversample))
        self._tail = joined[:, -3:].copy()
        return self.result

    def reset(self) -> None:
        self.peak = 0.0
        self._tail = None
