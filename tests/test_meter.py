"""
Batch measurement scenarios.
"""
import math

import numpy as np
import pytest

from loudness_engine import InvalidInputError, MeterConfig, MultichannelSignal, measure
from loudness_engine.dsp.k_weighting import apply_k_weighting
from loudness_engine.reference import reference_integrated_loudness
from tests.signals import gen_sine


def test_silence(silence, sample_rate):
    result = measure(silence, sample_rate)

    assert result.integrated_loudness < -60
    assert result.true_peak_db < -60
    assert result.loudness_range <= 1
    assert len(result.momentary) > 0 and len(result.short_term) > 0
    assert result.gate.block_count == 0


def test_sine(sine, sample_rate):
    result = measure(sine, sample_rate)

    assert len(result.momentary) > 0 and len(result.short_term) > 0
    assert result.program_loudness_range > 0

    _, m_time, m_idx = result.momentary_max
    _, s_time, s_idx = result.short_term_max
    assert m_idx >= 0 and s_idx >= 0
    assert 0.0 <= m_time <= 3.0
    assert 0.0 <= s_time <= 3.0


def test_sine_level(sine, sample_rate):
    result = measure(sine, sample_rate)
    # Two channels at 0.5 amplitude: 10*log10(2 * 0.125) - 0.691
    assert result.integrated_loudness == pytest.approx(-6.71, abs=0.3)


def test_band_limited_noise(noise, sample_rate):
    result = measure(noise, sample_rate)

    assert result.loudness_range > 0
    for value in (
        result.integrated_loudness,
        result.true_peak_db,
        result.loudness_range,
        result.dynamic_range,
        result.program_loudness_range,
    ):
        assert math.isfinite(value)


def test_fading_program_has_range(fade, sample_rate):
    result = measure(fade, sample_rate)
    assert result.loudness_range > 0
    assert result.dynamic_range > 0


def test_measure_is_idempotent(noise, sample_rate):
    first = measure(noise, sample_rate)
    second = measure(noise, sample_rate)

    assert first.to_dict() == second.to_dict()
    assert np.array_equal(first.momentary.mean_squares, second.momentary.mean_squares)
    assert first.true_peak_db == second.true_peak_db


def test_true_peak_not_below_sample_peak(noise, sample_rate):
    weighted, _ = apply_k_weighting(noise, sample_rate)
    result = measure(noise, sample_rate)
    assert result.peak.peak >= np.max(np.abs(weighted))

    raw = measure(noise, sample_rate, config=MeterConfig(true_peak_source="raw"))
    assert raw.peak.peak >= np.max(np.abs(noise))


def test_prefiltered_input_skips_k_weighting(sample_rate):
    data = gen_sine(freq=1000.0, amp=0.5, duration_sec=4.0)
    result = measure(data, sample_rate, prefiltered=True)
    assert result.integrated_loudness == pytest.approx(10 * np.log10(0.25) - 0.691, abs=1e-6)


def test_short_signal_has_empty_short_term_series(sample_rate):
    result = measure(gen_sine(duration_sec=1.0), sample_rate)

    assert len(result.momentary) > 0
    assert result.short_term.is_empty
    assert result.loudness_range == 0.0
    assert math.isnan(result.range.low)
    assert result.dynamic_range == 0.0


def test_accepts_signal_object(sine, sample_rate):
    signal = MultichannelSignal(channels=sine, sample_rate=sample_rate)
    assert measure(signal).integrated_loudness == measure(sine, sample_rate).integrated_loudness


def test_input_is_not_modified(sine, sample_rate):
    original = sine.copy()
    measure(sine, sample_rate)
    assert np.array_equal(sine, original)


def test_mismatched_channel_lengths_raise(sample_rate):
    with pytest.raises(InvalidInputError):
        measure([np.zeros(48000), np.zeros(47999)], sample_rate)


@pytest.mark.parametrize("rate", [0, -48000, None, float("nan")])
def test_bad_sample_rate_raises(sine, rate):
    with pytest.raises(InvalidInputError):
        measure(sine, rate)


def test_custom_windows():
    config = MeterConfig(momentary_window_sec=0.2, short_term_window_sec=1.0, hop_sec=0.05)
    result = measure(gen_sine(duration_sec=2.0), 48000, config=config)

    assert len(result.momentary) == 37  # (96000 - 9600) / 2400 + 1
    assert len(result.short_term) == 21


def test_to_dict_is_json_safe(silence, sample_rate):
    summary = measure(silence, sample_rate).to_dict()

    assert summary["integrated_lufs"] is None
    assert summary["true_peak_dbtp"] is None
    assert summary["loudness_range_lu"] == 0.0
    assert all(v is None for v in summary["momentary"]["values"])


def test_close_to_pyloudnorm_for_a_tone(sample_rate):
    data = gen_sine(freq=1000.0, amp=0.5, duration_sec=5.0)
    signal = MultichannelSignal(channels=data, sample_rate=sample_rate)

    ours = measure(signal).integrated_loudness
    reference = reference_integrated_loudness(signal)
    assert ours == pytest.approx(reference, abs=1.0)


def test_numpy_integer_sample_rate(sine):
    result = measure(sine, np.int64(48000))
    assert result.integrated_loudness == measure(sine, 48000).integrated_loudness


def test_reference_rejects_audio_shorter_than_one_block(sample_rate):
    signal = MultichannelSignal(channels=gen_sine(duration_sec=0.1), sample_rate=sample_rate)
    with pytest.raises(InvalidInputError):
        reference_integrated_loudness(signal)
