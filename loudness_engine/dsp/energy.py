"""
Windowed mean-square energy and loudness series.
"""
from dataclasses import dataclass
from typing import Tuple, Union

import numpy as np

from loudness_engine.config import WindowSpec
from loudness_engine.dsp.statistics import max_with_index


K_OFFSET_DB = -0.691

ArrayOrFloat = Union[np.ndarray, float]


def loudness_from_mean_square(mean_square: ArrayOrFloat, k_offset: float = K_OFFSET_DB) -> ArrayOrFloat:
    """10*log10(ms) + offset; zero or negative energy maps to -inf."""
    ms = np.asarray(mean_square, dtype=np.float64)
    out = np.full(ms.shape, -np.inf, dtype=np.float64)
    positive = ms > 0
    out[positive] = 10.0 * np.log10(ms[positive]) + k_offset
    if out.ndim == 0:
        return float(out)
    return out


def mean_square_from_loudness(loudness: ArrayOrFloat, k_offset: float = K_OFFSET_DB) -> ArrayOrFloat:
    ms = np.power(10.0, (np.asarray(loudness, dtype=np.float64) - k_offset) / 10.0)
    if ms.ndim == 0:
        return float(ms)
    return ms


@dataclass(frozen=True)
class EnergySeries:
    """
    Per-window energy over time.

    Attributes:
        times: Window centres in seconds
        mean_squares: Channel-summed mean-square energy per window
        loudness: Loudness per window in LUFS (-inf for silent windows)
    """
    times: np.ndarray
    mean_squares: np.ndarray
    loudness: np.ndarray

    def __len__(self) -> int:
        return int(self.loudness.shape[0])

    @property
    def is_empty(self) -> bool:
        return len(self) == 0

    @property
    def current(self) -> float:
        """Most recent loudness value, NaN when the series is empty."""
        if self.is_empty:
            return float("nan")
        return float(self.loudness[-1])

    def maximum(self) -> Tuple[float, float, int]:
        """Return (loudness, time, index) of the loudest window; index is -1 when empty."""
        value, index = max_with_index(self.loudness)
        if index < 0:
            return value, float("nan"), index
        return value, float(self.times[index]), index

    @classmethod
    def empty(cls) -> 'EnergySeries':
        return cls(
            times=np.zeros(0, dtype=np.float64),
            mean_squares=np.zeros(0, dtype=np.float64),
            loudness=np.zeros(0, dtype=np.float64),
        )

    @classmethod
    def from_blocks(cls, times, mean_squares, k_offset: float = K_OFFSET_DB) -> 'EnergySeries':
        mean_squares = np.asarray(mean_squares, dtype=np.float64)
        return cls(
            times=np.asarray(times, dtype=np.float64),
            mean_squares=mean_squares,
            loudness=loudness_from_mean_square(mean_squares, k_offset).reshape(-1),
        )


def energy_series(
    channels: np.ndarray,
    sample_rate: int,
    window: WindowSpec,
    k_offset: float = K_OFFSET_DB,
) -> EnergySeries:
    """
    Compute the windowed energy series of (channels, samples) data.

    Uses one prefix sum of squares per channel, so the cost is linear in the
    signal length whatever the window/hop ratio.
    """
    data = np.asarray(channels, dtype=np.float64)
    if data.ndim == 1:
        data = data.reshape(1, -1)
    length = data.shape[1]

    if length < window.length:
        return EnergySeries.empty()

    prefix = np.zeros((data.shape[0], length + 1), dtype=np.float64)
    np.cumsum(data * data, axis=1, out=prefix[:, 1:])

    starts = np.arange(0, length - window.length + 1, window.hop)
    window_sums = prefix[:, starts + window.length] - prefix[:, starts]
    mean_squares = (window_sums / window.length).sum(axis=0)

    times = (starts + window.length * 0.5) / float(sample_rate)
    return EnergySeries.from_blocks(times, mean_squares, k_offset)
