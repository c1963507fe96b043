"""
Fixed-capacity multichannel circular sample buffer.
"""
import numpy as np

from loudness_engine.exceptions import InvalidInputError


class RingBuffer:
    """
    Keeps the most recent `capacity` samples per channel.

    Storage is allocated once; writes overwrite the oldest samples.
    """

    def __init__(self, channels: int, capacity: int):
        if channels < 1 or capacity < 1:
            raise InvalidInputError(
                f"RingBuffer needs channels >= 1 and capacity >= 1, got ({channels}, {capacity})"
            )
        self.channels = int(channels)
        self.capacity = int(capacity)
        self._ring = np.zeros((self.channels, self.capacity), dtype=np.float64)
        self._write_idx = 0
        self.filled = 0

    def write(self, block: np.ndarray) -> None:
        block = np.asarray(block, dtype=np.float64)
        if block.ndim != 2 or block.shape[0] != self.channels:
            raise InvalidInputError(
                f"Expected block shaped ({self.channels}, frames), got {block.shape}"
            )
        frames = block.shape[1]
        if frames == 0:
            return

        if frames >= self.capacity:
            # Only the newest `capacity` samples survive
            self._ring[:] = block[:, frames - self.capacity:]
            self._write_idx = 0
            self.filled = self.capacity
            return

        i0 = self._write_idx
        end = i0 + frames
        if end <= self.capacity:
            self._ring[:, i0:end] = block
        else:
            first = self.capacity - i0
            self._ring[:, i0:] = block[:, :first]
            self._ring[:, :end - self.capacity] = block[:, first:]

        self._write_idx = end % self.capacity
        self.filled = min(self.filled + frames, self.capacity)

    def latest(self, count: int) -> np.ndarray:
        """Copy of the newest min(count, filled) samples, oldest first."""
        count = max(0, min(int(count), self.filled))
        start = (self._write_idx - count) % self.capacity
        if start + count <= self.capacity:
            return self._ring[:, start:start + count].copy()
        first = self.capacity - start
        return np.concatenate([self._ring[:, start:], self._ring[:, :count - first]], axis=1)

    def mean_square(self, count: int) -> float:
        """Channel-summed mean square of the newest min(count, filled) samples."""
        recent = self.latest(count)
        if recent.shape[1] == 0:
            return 0.0
        return float(np.mean(recent * recent, axis=1).sum())

    def clear(self) -> None:
        self._ring.fill(0.0)
        self._write_idx = 0
        self.filled = 0
