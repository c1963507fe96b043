"""
Batch loudness measurement and the result record shared with streaming.
"""
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import numpy as np

from loudness_engine.config import MeterConfig
from loudness_engine.dsp.energy import EnergySeries, energy_series
from loudness_engine.dsp.gating import GateResult, integrated_loudness
from loudness_engine.dsp.k_weighting import apply_k_weighting
from loudness_engine.dsp.statistics import (
    DynamicRangeResult,
    RangeResult,
    dynamic_range,
    loudness_range,
)
from loudness_engine.dsp.true_peak import PeakResult, true_peak
from loudness_engine.signal import ChannelData, MultichannelSignal
from loudness_engine.utils.logger import get_logger, log_performance

logger = get_logger(__name__)


def _json_float(value: float) -> Optional[float]:
    value = float(value)
    return value if math.isfinite(value) else None


@dataclass(frozen=True)
class LoudnessResult:
    """One measurement: the M/S series plus the derived program statistics."""
    momentary: EnergySeries
    short_term: EnergySeries
    gate: GateResult
    range: RangeResult
    dynamics: DynamicRangeResult
    peak: PeakResult
    duration: float

    @property
    def integrated_loudness(self) -> float:
        return self.gate.integrated

    @property
    def loudness_range(self) -> float:
        return self.range.lra

    @property
    def true_peak_db(self) -> float:
        return self.peak.db

    @property
    def dynamic_range(self) -> float:
        return self.dynamics.dr

    @property
    def program_loudness_range(self) -> float:
        """PLR: true-peak level minus integrated loudness."""
        return self.peak.db - self.gate.integrated

    @property
    def momentary_max(self) -> Tuple[float, float, int]:
        return self.momentary.maximum()

    @property
    def short_term_max(self) -> Tuple[float, float, int]:
        return self.short_term.maximum()

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe summary; non-finite numbers become None."""
        m_max, m_time, m_idx = self.momentary_max
        s_max, s_time, s_idx = self.short_term_max
        return {
            "integrated_lufs": _json_float(self.integrated_loudness),
            "relative_gate_lufs": _json_float(self.gate.relative_threshold),
            "gated_blocks": self.gate.block_count,
            "loudness_range_lu": _json_float(self.loudness_range),
            "lra_threshold_lufs": _json_float(self.range.threshold),
            "true_peak_dbtp": _json_float(self.true_peak_db),
            "plr_lu": _json_float(self.program_loudness_range),
            "dynamic_range_lu": _json_float(self.dynamic_range),
            "duration_sec": self.duration,
            "momentary": {
                "current": _json_float(self.momentary.current),
                "max": _json_float(m_max),
                "max_time": _json_float(m_time),
                "max_index": m_idx,
                "times": [float(t) for t in self.momentary.times],
                "values": [_json_float(v) for v in self.momentary.loudness],
            },
            "short_term": {
                "current": _json_float(self.short_term.current),
                "max": _json_float(s_max),
                "max_time": _json_float(s_time),
                "max_index": s_idx,
                "times": [float(t) for t in self.short_term.times],
                "values": [_json_float(v) for v in self.short_term.loudness],
            },
        }


def summarize(
    momentary: EnergySeries,
    short_term: EnergySeries,
    peak: PeakResult,
    config: MeterConfig,
    duration: float,
) -> LoudnessResult:
    """
    Gate and reduce energy histories into a LoudnessResult.

    Used unchanged by batch measurement and by every streaming hop; only the
    series handed in differ.
    """
    gate = integrated_loudness(
        momentary.mean_squares,
        momentary.loudness,
        absolute_gate=config.absolute_gate_lufs,
        relative_offset=config.relative_gate_lu,
        k_offset=config.k_offset_db,
    )
    lra = loudness_range(short_term.loudness, gate.integrated, gate_offset=config.lra_gate_lu)
    dr = dynamic_range(short_term.loudness)

    return LoudnessResult(
        momentary=momentary,
        short_term=short_term,
        gate=gate,
        range=lra,
        dynamics=dr,
        peak=peak,
        duration=float(duration),
    )


@log_performance
def measure(
    signal: ChannelData,
    sample_rate: Optional[int] = None,
    config: Optional[MeterConfig] = None,
    prefiltered: bool = False,
) -> LoudnessResult:
    """
    Measure a complete multichannel signal.

    Args:
        signal: MultichannelSignal, or channel data shaped (channels, samples)
        sample_rate: Required unless signal is a MultichannelSignal
        config: Window, hop and gate settings; defaults to MeterConfig()
        prefiltered: True when the samples are already K-weighted

    Returns:
        LoudnessResult with Momentary/Short-term series, integrated loudness,
        LRA, true peak, DR and PLR
    """
    config = config or MeterConfig()
    if not isinstance(signal, MultichannelSignal):
        signal = MultichannelSignal(channels=signal, sample_rate=sample_rate)
    elif sample_rate is not None and sample_rate != signal.sample_rate:
        logger.warning(
            f"Ignoring sample_rate={sample_rate}; signal carries {signal.sample_rate} Hz"
        )

    rate = signal.sample_rate
    raw = signal.channels
    if prefiltered:
        weighted = raw
    else:
        weighted, _ = apply_k_weighting(raw, rate)

    m_spec, s_spec = config.window_specs(rate)
    momentary = energy_series(weighted, rate, m_spec, config.k_offset_db)
    short_term = energy_series(weighted, rate, s_spec, config.k_offset_db)
    if short_term.is_empty:
        logger.debug(
            f"Signal of {signal.duration:.3f}s is shorter than the {config.short_term_window_sec}s "
            f"short-term window; range statistics will be empty"
        )

    peak_source = raw if config.true_peak_source == "raw" else weighted
    peak = true_peak(peak_source, config.oversample)

    result = summarize(momentary, short_term, peak, config, signal.duration)
    logger.debug(
        f"Measured {signal.num_channels}ch {rate}Hz {signal.duration:.3f}s: "
        f"I={result.integrated_loudness:.2f} LUFS, LRA={result.loudness_range:.2f} LU, "
        f"TP={result.true_peak_db:.2f} dBTP"
    )
    return result
