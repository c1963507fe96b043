"""
Unit tests for integrated loudness gating.
"""
import numpy as np
import pytest

from loudness_engine.dsp.energy import loudness_from_mean_square
from loudness_engine.dsp.gating import integrated_loudness


def _gate(mean_squares):
    mean_squares = np.asarray(mean_squares, dtype=np.float64)
    return integrated_loudness(mean_squares, loudness_from_mean_square(mean_squares))


def test_empty_series_is_silent():
    result = _gate([])
    assert result.integrated == float("-inf")
    assert result.block_count == 0


def test_blocks_below_absolute_gate_are_discarded():
    # -80 LUFS blocks only
    quiet = loudness_from_mean_square(1.0) - 80
    ms = 10 ** ((quiet + 0.691) / 10)
    result = _gate([ms] * 10)
    assert result.integrated == float("-inf")
    assert result.relative_threshold == float("-inf")
    assert result.block_count == 0


def test_block_exactly_at_absolute_gate_is_discarded():
    result = integrated_loudness(np.array([1.0]), np.array([-70.0]))
    assert result.block_count == 0


def test_constant_blocks():
    result = _gate([0.25] * 12)
    assert result.integrated == pytest.approx(loudness_from_mean_square(0.25))
    assert result.block_count == 12
    assert result.relative_threshold == pytest.approx(result.integrated - 10)


def test_relative_gate_drops_quiet_blocks():
    result = _gate([1.0] * 10 + [1e-3] * 10)

    preliminary = loudness_from_mean_square(np.mean([1.0] * 10 + [1e-3] * 10))
    assert result.relative_threshold == pytest.approx(preliminary - 10)
    assert result.integrated == pytest.approx(loudness_from_mean_square(1.0))
    assert result.block_count == 10


def test_falls_back_to_preliminary_when_relative_gate_keeps_nothing():
    result = integrated_loudness(np.array([1.0, 1.0]), np.array([-60.0, -60.0]))

    preliminary = loudness_from_mean_square(1.0)
    assert result.integrated == pytest.approx(preliminary)
    assert result.block_count == 2


def test_silent_blocks_do_not_pull_down_the_result():
    loud_only = _gate([0.5] * 20)
    with_silence = _gate([0.5] * 20 + [0.0] * 20)
    assert with_silence.integrated == pytest.approx(loud_only.integrated)
