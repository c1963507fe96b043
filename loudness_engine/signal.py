"""
Multichannel signal container and conversion from decoded audio.
"""
from dataclasses import dataclass
from typing import Sequence, Union

import numpy as np
from pydub import AudioSegment

from loudness_engine.config import validate_sample_rate
from loudness_engine.exceptions import InvalidInputError


ChannelData = Union[np.ndarray, Sequence[Sequence[float]], Sequence[float]]


def as_channel_array(channels: ChannelData) -> np.ndarray:
    """
    Copy caller samples into a float64 (channels, samples) array.

    A 1-D input is treated as mono. A sequence of per-channel arrays must have
    equal lengths.
    """
    if isinstance(channels, np.ndarray):
        data = np.array(channels, dtype=np.float64, copy=True)
    else:
        rows = [np.asarray(ch, dtype=np.float64) for ch in channels]
        if not rows:
            raise InvalidInputError("Signal must have at least one channel")
        if all(row.ndim == 0 for row in rows):
            data = np.array(rows, dtype=np.float64)
        else:
            lengths = {row.shape for row in rows}
            if len(lengths) > 1:
                raise InvalidInputError(
                    f"All channels must have the same length, got shapes {sorted(lengths)}"
                )
            if any(row.ndim != 1 for row in rows):
                raise InvalidInputError("Each channel must be a one-dimensional sample sequence")
            data = np.array(rows, dtype=np.float64)

    if data.ndim == 1:
        data = data.reshape(1, -1)
    if data.ndim != 2:
        raise InvalidInputError(f"Expected (channels, samples) data, got array with shape {data.shape}")
    if data.shape[0] < 1:
        raise InvalidInputError("Signal must have at least one channel")
    return data


@dataclass(frozen=True)
class MultichannelSignal:
    """Equal-length channels sharing one sample rate."""
    channels: np.ndarray
    sample_rate: int

    def __post_init__(self):
        validate_sample_rate(self.sample_rate)
        object.__setattr__(self, "channels", as_channel_array(self.channels))

    @property
    def num_channels(self) -> int:
        return int(self.channels.shape[0])

    @property
    def num_samples(self) -> int:
        return int(self.channels.shape[1])

    @property
    def duration(self) -> float:
        return self.num_samples / float(self.sample_rate)

    @classmethod
    def from_audiosegment(cls, audio: AudioSegment) -> 'MultichannelSignal':
        """
        Convert a decoded AudioSegment into float channels in [-1.0, 1.0].
        """
        if audio is None:
            raise InvalidInputError("Cannot convert to signal: audio is None")

        if not hasattr(audio, 'channels') or audio.channels is None:
            raise InvalidInputError(f"Cannot convert to signal: audio has invalid channels (audio type: {type(audio)})")

        if not hasattr(audio, 'sample_width') or audio.sample_width is None:
            raise InvalidInputError(f"Cannot convert to signal: audio has invalid sample_width (audio type: {type(audio)})")

        samples = np.array(audio.get_array_of_samples())
        samples = samples.reshape((-1, audio.channels)).T
        scaled = samples.astype(np.float64) / (2 ** (8 * audio.sample_width - 1))

        return cls(channels=scaled, sample_rate=int(audio.frame_rate))
