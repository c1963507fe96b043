"""
LoudnessStream: incremental loudness measurement over arriving sample blocks.
"""
from collections import deque
from enum import Enum
from typing import Deque, Optional

import numpy as np

from loudness_engine.config import MeterConfig, WindowSpec, validate_sample_rate
from loudness_engine.dsp.energy import EnergySeries
from loudness_engine.dsp.k_weighting import KWeightingState, apply_k_weighting
from loudness_engine.dsp.true_peak import TruePeakTracker
from loudness_engine.exceptions import InvalidInputError, StreamStateError
from loudness_engine.meter import LoudnessResult, summarize
from loudness_engine.signal import ChannelData, as_channel_array
from loudness_engine.streaming.ring_buffer import RingBuffer
from loudness_engine.utils.logger import get_logger

logger = get_logger(__name__)


class StreamState(Enum):
    IDLE = "idle"
    RUNNING = "running"


class _History:
    """Append-only (time, mean square) history for one window, optionally capped."""

    def __init__(self, limit: Optional[int]):
        self.times: Deque[float] = deque(maxlen=limit)
        self.mean_squares: Deque[float] = deque(maxlen=limit)

    def append(self, time_sec: float, mean_square: float) -> None:
        self.times.append(time_sec)
        self.mean_squares.append(mean_square)

    def to_series(self, k_offset: float) -> EnergySeries:
        return EnergySeries.from_blocks(
            np.fromiter(self.times, dtype=np.float64, count=len(self.times)),
            np.fromiter(self.mean_squares, dtype=np.float64, count=len(self.mean_squares)),
            k_offset,
        )


class LoudnessStream:
    """
    Streaming loudness meter.

    Blocks are written into two circular buffers sized to the Short-term and
    Momentary windows. Every time at least one hop of frames has arrived since
    the last emission, the newest window of each buffer is reduced to a
    mean-square block, appended to the history, and the whole history is
    summarised exactly like a batch measurement.

    While a buffer is still filling its effective window is the filled part,
    so early readings ramp up rather than waiting for a full window.
    """

    def __init__(
        self,
        sample_rate: int,
        config: Optional[MeterConfig] = None,
        prefiltered: bool = True,
    ):
        validate_sample_rate(sample_rate)
        self.sample_rate = sample_rate
        self.config = config or MeterConfig()
        self.prefiltered = prefiltered
        self.momentary_spec, self.short_term_spec = self.config.window_specs(sample_rate)
        self.hop = self.short_term_spec.hop

        self.state = StreamState.IDLE
        self.channels: Optional[int] = None
        self.last_result: Optional[LoudnessResult] = None
        self._reset_state()

    def _reset_state(self) -> None:
        self._short_buf: Optional[RingBuffer] = None
        self._momentary_buf: Optional[RingBuffer] = None
        self._filter_state: Optional[KWeightingState] = None
        self._peak_tracker: Optional[TruePeakTracker] = None
        self._momentary_history: Optional[_History] = None
        self._short_history: Optional[_History] = None
        self.frame_count = 0
        self.last_hop_frame = 0
        self.elapsed_sec = 0.0

    @property
    def is_running(self) -> bool:
        return self.state is StreamState.RUNNING

    def start(self, channels: Optional[int] = None) -> 'LoudnessStream':
        """Allocate state and begin accepting blocks."""
        if self.is_running:
            raise StreamStateError("Stream is already running")

        self._reset_state()
        self.last_result = None
        self.channels = None
        limit = self.config.max_history_blocks
        self._momentary_history = _History(limit)
        self._short_history = _History(limit)
        self._peak_tracker = TruePeakTracker(self.config.oversample)
        if channels is not None:
            self._allocate(int(channels))
        self.state = StreamState.RUNNING

        logger.debug(
            f"Stream started: {self.sample_rate}Hz, M={self.momentary_spec.length} "
            f"S={self.short_term_spec.length} hop={self.hop} samples, prefiltered={self.prefiltered}"
        )
        return self

    def _allocate(self, channels: int) -> None:
        if channels < 1:
            raise InvalidInputError(f"Stream needs at least one channel, got {channels}")
        self.channels = channels
        self._short_buf = RingBuffer(channels, self.short_term_spec.length)
        self._momentary_buf = RingBuffer(channels, self.momentary_spec.length)
        if not self.prefiltered:
            self._filter_state = KWeightingState.zeros(channels)

    def _as_block(self, block: ChannelData) -> np.ndarray:
        data = as_channel_array(block)
        if self.channels is not None and data.shape[0] != self.channels:
            raise InvalidInputError(
                f"Block has {data.shape[0]} channels, stream was started with {self.channels}"
            )
        return data

    def feed(self, block: ChannelData) -> Optional[LoudnessResult]:
        """
        Consume one block shaped (channels, frames).

        Returns:
            A LoudnessResult on hop boundaries, otherwise None
        """
        if not self.is_running:
            raise StreamStateError("Cannot feed a stream that is not running")

        data = self._as_block(block)
        frames = data.shape[1]
        if frames == 0:
            return None
        if self.channels is None:
            self._allocate(data.shape[0])

        raw = data
        if self.prefiltered:
            weighted = data
        else:
            weighted, self._filter_state = apply_k_weighting(data, self.sample_rate, self._filter_state)

        self._short_buf.write(weighted)
        self._momentary_buf.write(weighted)
        self._peak_tracker.update(raw if self.config.true_peak_source == "raw" else weighted)

        self.frame_count += frames
        self.elapsed_sec += frames / float(self.sample_rate)

        if self.frame_count - self.last_hop_frame < self.hop:
            return None
        self.last_hop_frame = self.frame_count
        return self._emit()

    def _window_block(self, buf: RingBuffer, spec: WindowSpec):
        effective = min(buf.filled, spec.length)
        mean_square = buf.mean_square(effective)
        centre = self.elapsed_sec - effective / (2.0 * self.sample_rate)
        return centre, mean_square

    def _emit(self) -> LoudnessResult:
        m_time, m_ms = self._window_block(self._momentary_buf, self.momentary_spec)
        s_time, s_ms = self._window_block(self._short_buf, self.short_term_spec)
        self._momentary_history.append(m_time, m_ms)
        self._short_history.append(s_time, s_ms)

        k_offset = self.config.k_offset_db
        result = summarize(
            self._momentary_history.to_series(k_offset),
            self._short_history.to_series(k_offset),
            self._peak_tracker.result,
            self.config,
            self.elapsed_sec,
        )
        self.last_result = result
        return result

    def stop(self) -> Optional[LoudnessResult]:
        """Release all buffers and history; returns the last emitted result."""
        if not self.is_running:
            raise StreamStateError("Cannot stop a stream that is not running")
        result = self.last_result
        logger.debug(
            f"Stream stopped after {self.frame_count} frames ({self.elapsed_sec:.3f}s)"
        )
        self._reset_state()
        self.channels = None
        self.state = StreamState.IDLE
        return result


def create_stream(
    sample_rate: int,
    config: Optional[MeterConfig] = None,
    prefiltered: bool = True,
    channels: Optional[int] = None,
) -> LoudnessStream:
    """Create and start a LoudnessStream."""
    return LoudnessStream(sample_rate, config=config, prefiltered=prefiltered).start(channels)


def feed(stream: LoudnessStream, block: ChannelData) -> Optional[LoudnessResult]:
    return stream.feed(block)


def stop(stream: LoudnessStream) -> Optional[LoudnessResult]:
    return stream.stop()
