"""
Unit tests for windowed energy series.
"""
import numpy as np
import pytest

from loudness_engine.config import WindowSpec
from loudness_engine.dsp.energy import (
    K_OFFSET_DB,
    EnergySeries,
    energy_series,
    loudness_from_mean_square,
    mean_square_from_loudness,
)


def _naive_series(data, window):
    mean_squares = []
    start = 0
    while start + window.length <= data.shape[1]:
        block = data[:, start:start + window.length]
        mean_squares.append(sum(np.mean(ch * ch) for ch in block))
        start += window.hop
    return np.array(mean_squares)


def test_block_count_and_centres():
    window = WindowSpec(length=19200, hop=4800)
    series = energy_series(np.ones((2, 48000)), 48000, window)

    assert len(series) == 7
    assert series.times[0] == pytest.approx(0.2)
    assert np.allclose(np.diff(series.times), 0.1)


def test_matches_naive_window_sums():
    rng = np.random.default_rng(11)
    data = rng.uniform(-1, 1, size=(3, 5000))
    window = WindowSpec(length=700, hop=130)

    series = energy_series(data, 8000, window)

    assert np.allclose(series.mean_squares, _naive_series(data, window), rtol=1e-9)


def test_channels_contribute_with_unit_weight():
    data = np.full((2, 1000), 0.5)
    series = energy_series(data, 1000, WindowSpec(length=100, hop=100))

    assert np.allclose(series.mean_squares, 0.5)
    expected = 10 * np.log10(0.5) + K_OFFSET_DB
    assert np.allclose(series.loudness, expected)


def test_silent_windows_are_negative_infinity():
    series = energy_series(np.zeros((2, 1000)), 1000, WindowSpec(length=100, hop=50))
    assert len(series) > 0
    assert np.all(np.isneginf(series.loudness))


def test_signal_shorter_than_window_gives_empty_series():
    series = energy_series(np.ones((1, 99)), 1000, WindowSpec(length=100, hop=10))
    assert series.is_empty
    assert np.isnan(series.current)
    assert series.maximum()[2] == -1


def test_maximum_reports_time_of_loudest_window():
    data = np.zeros((1, 1000))
    data[0, 600:700] = 1.0
    series = energy_series(data, 1000, WindowSpec(length=100, hop=100))

    value, time, index = series.maximum()
    assert index == 6
    assert time == pytest.approx(0.65)
    assert value == pytest.approx(K_OFFSET_DB)


def test_loudness_conversion():
    assert loudness_from_mean_square(0.0) == float("-inf")
    assert loudness_from_mean_square(-1.0) == float("-inf")
    assert loudness_from_mean_square(1.0) == pytest.approx(K_OFFSET_DB)
    assert mean_square_from_loudness(loudness_from_mean_square(0.25)) == pytest.approx(0.25)


def test_from_blocks_derives_loudness():
    series = EnergySeries.from_blocks([0.1, 0.2], [1.0, 0.0], k_offset=0.0)
    assert series.loudness[0] == pytest.approx(0.0)
    assert np.isneginf(series.loudness[1])
