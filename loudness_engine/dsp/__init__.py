# DSP Module exports
from loudness_engine.dsp.energy import (
    EnergySeries,
    energy_series,
    loudness_from_mean_square,
    mean_square_from_loudness,
)
from loudness_engine.dsp.gating import GateResult, integrated_loudness
from loudness_engine.dsp.k_weighting import (
    KWeightingState,
    apply_k_weighting,
    k_weighting_coefficients,
)
from loudness_engine.dsp.statistics import (
    DynamicRangeResult,
    RangeResult,
    dynamic_range,
    loudness_range,
    max_with_index,
    percentile,
)
from loudness_engine.dsp.true_peak import PeakResult, TruePeakTracker, true_peak
