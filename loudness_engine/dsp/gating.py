"""
Two-stage gating of Momentary blocks into a single integrated loudness.

The relative gate is applied once rather than iterated to convergence.
"""
from dataclasses import dataclass

import numpy as np

from loudness_engine.dsp.energy import K_OFFSET_DB, loudness_from_mean_square


ABSOLUTE_GATE_LUFS = -70.0
RELATIVE_GATE_LU = 10.0


@dataclass(frozen=True)
class GateResult:
    integrated: float
    relative_threshold: float
    block_count: int


SILENT_GATE = GateResult(integrated=float("-inf"), relative_threshold=float("-inf"), block_count=0)


def integrated_loudness(
    mean_squares: np.ndarray,
    loudness: np.ndarray,
    absolute_gate: float = ABSOLUTE_GATE_LUFS,
    relative_offset: float = RELATIVE_GATE_LU,
    k_offset: float = K_OFFSET_DB,
) -> GateResult:
    """
    Gate Momentary blocks and average the survivors' energy.

    Args:
        mean_squares: Per-block channel-summed mean-square energy
        loudness: Per-block loudness matching mean_squares
        absolute_gate: Blocks at or below this loudness are discarded
        relative_offset: LU below the preliminary loudness for the relative gate
        k_offset: Calibration offset used to convert energy to loudness

    Returns:
        GateResult; silence gives -inf loudness with zero retained blocks
    """
    mean_squares = np.asarray(mean_squares, dtype=np.float64)
    loudness = np.asarray(loudness, dtype=np.float64)

    above_absolute = loudness > absolute_gate
    if not np.any(above_absolute):
        return SILENT_GATE

    abs_energy = mean_squares[above_absolute]
    preliminary = loudness_from_mean_square(float(np.mean(abs_energy)), k_offset)
    threshold = preliminary - relative_offset

    above_relative = loudness[above_absolute] >= threshold
    if not np.any(above_relative):
        return GateResult(
            integrated=preliminary,
            relative_threshold=threshold,
            block_count=int(abs_energy.size),
        )

    rel_energy = abs_energy[above_relative]
    return GateResult(
        integrated=loudness_from_mean_square(float(np.mean(rel_energy)), k_offset),
        relative_threshold=threshold,
        block_count=int(rel_energy.size),
    )
