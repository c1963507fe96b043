"""
K-weighting prefilter: a 60 Hz high-pass followed by a +4 dB high-shelf at 4 kHz.

Filter state is an explicit value. Batch callers start from zero state;
streaming callers pass the returned state back in with the next block.
"""
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple

import numpy as np
from scipy import signal

from loudness_engine.exceptions import InvalidInputError


HIGH_PASS_HZ = 60.0
HIGH_PASS_Q = 1.0 / np.sqrt(2.0)
HIGH_SHELF_HZ = 4000.0
HIGH_SHELF_GAIN_DB = 4.0
HIGH_SHELF_Q = 0.707


@dataclass(frozen=True)
class BiquadCoefficients:
    """Normalised second-order section (a[0] == 1)."""
    b: Tuple[float, float, float]
    a: Tuple[float, float, float]


def _normalise(b0, b1, b2, a0, a1, a2) -> BiquadCoefficients:
    return BiquadCoefficients(
        b=(b0 / a0, b1 / a0, b2 / a0),
        a=(1.0, a1 / a0, a2 / a0),
    )


def _clamp_frequency(freq_hz: float, sample_rate: int) -> float:
    nyquist = sample_rate / 2.0
    return min(max(freq_hz, 1e-6), nyquist * 0.999999)


def highpass_coefficients(freq_hz: float, q: float, sample_rate: int) -> BiquadCoefficients:
    # Audio EQ Cookbook: high-pass
    omega = 2 * np.pi * _clamp_frequency(freq_hz, sample_rate) / sample_rate
    sin_omega = np.sin(omega)
    cos_omega = np.cos(omega)
    alpha = sin_omega / (2 * q)

    b0 = (1 + cos_omega) / 2
    b1 = -(1 + cos_omega)
    b2 = (1 + cos_omega) / 2
    a0 = 1 + alpha
    a1 = -2 * cos_omega
    a2 = 1 - alpha
    return _normalise(b0, b1, b2, a0, a1, a2)


def high_shelf_coefficients(freq_hz: float, gain_db: float, q: float, sample_rate: int) -> BiquadCoefficients:
    # Audio EQ Cookbook: high shelf
    A = 10 ** (gain_db / 40)
    omega = 2 * np.pi * _clamp_frequency(freq_hz, sample_rate) / sample_rate
    sin_omega = np.sin(omega)
    cos_omega = np.cos(omega)
    alpha = sin_omega / (2 * q)
    two_sqrt_a_alpha = 2 * np.sqrt(A) * alpha

    b0 = A * ((A + 1) + (A - 1) * cos_omega + two_sqrt_a_alpha)
    b1 = -2 * A * ((A - 1) + (A + 1) * cos_omega)
    b2 = A * ((A + 1) + (A - 1) * cos_omega - two_sqrt_a_alpha)
    a0 = (A + 1) - (A - 1) * cos_omega + two_sqrt_a_alpha
    a1 = 2 * ((A - 1) - (A + 1) * cos_omega)
    a2 = (A + 1) - (A - 1) * cos_omega - two_sqrt_a_alpha
    return _normalise(b0, b1, b2, a0, a1, a2)


@lru_cache(maxsize=32)
def k_weighting_coefficients(sample_rate: int) -> Tuple[BiquadCoefficients, BiquadCoefficients]:
    """Return the (high-pass, high-shelf) stages for a sample rate."""
    return (
        highpass_coefficients(HIGH_PASS_HZ, HIGH_PASS_Q, sample_rate),
        high_shelf_coefficients(HIGH_SHELF_HZ, HIGH_SHELF_GAIN_DB, HIGH_SHELF_Q, sample_rate),
    )


@dataclass(frozen=True)
class KWeightingState:
    """Two-sample delay lines per channel for each stage, shape (channels, 2)."""
    highpass: np.ndarray
    shelf: np.ndarray

    @classmethod
    def zeros(cls, num_channels: int) -> 'KWeightingState':
        return cls(
            highpass=np.zeros((num_channels, 2), dtype=np.float64),
            shelf=np.zeros((num_channels, 2), dtype=np.float64),
        )

    @property
    def num_channels(self) -> int:
        return int(self.highpass.shape[0])


def apply_k_weighting(
    channels: np.ndarray,
    sample_rate: int,
    state: Optional[KWeightingState] = None,
) -> Tuple[np.ndarray, KWeightingState]:
    """
    Filter (channels, samples) data through both K-weighting stages.

    Args:
        channels: Samples shaped (channels, samples)
        sample_rate: Sample rate in Hz
        state: State returned by a previous call, or None for a fresh filter

    Returns:
        (filtered samples with the input's shape, state to continue from)
    """
    data = np.asarray(channels, dtype=np.float64)
    if data.ndim != 2:
        raise InvalidInputError(f"K-weighting expects (channels, samples) data, got shape {data.shape}")

    if state is None:
        state = KWeightingState.zeros(data.shape[0])
    elif state.num_channels != data.shape[0]:
        raise InvalidInputError(
            f"K-weighting state has {state.num_channels} channels, input has {data.shape[0]}"
        )

    if data.shape[1] == 0:
        return data.copy(), state

    highpass, shelf = k_weighting_coefficients(sample_rate)
    stage1, hp_zi = signal.lfilter(highpass.b, highpass.a, data, axis=-1, zi=state.highpass)
    stage2, shelf_zi = signal.lfilter(shelf.b, shelf.a, stage1, axis=-1, zi=state.shelf)
    return stage2, KWeightingState(highpass=hp_zi, shelf=shelf_zi)


def magnitude_response_db(freqs_hz: np.ndarray, sample_rate: int) -> np.ndarray:
    """Combined K-weighting magnitude in dB at the given frequencies."""
    freqs_hz = np.atleast_1d(np.asarray(freqs_hz, dtype=np.float64))
    response = np.ones_like(freqs_hz, dtype=np.complex128)
    for stage in k_weighting_coefficients(sample_rate):
        _, h = signal.freqz(stage.b, stage.a, worN=freqs_hz, fs=sample_rate)
        response = response * h
    return 20 * np.log10(np.abs(response))
