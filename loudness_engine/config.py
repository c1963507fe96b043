"""
Configuration dataclasses for loudness measurement.
"""
import json
import math
import numbers
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Dict, Any, Tuple, Union

from loudness_engine.exceptions import InvalidInputError


TRUE_PEAK_SOURCES = ("weighted", "raw")


def validate_sample_rate(sample_rate) -> None:
    if (
        isinstance(sample_rate, bool)
        or not isinstance(sample_rate, numbers.Real)
        or not math.isfinite(sample_rate)
        or sample_rate <= 0
    ):
        raise InvalidInputError(f"sample_rate must be a positive number, got {sample_rate!r}")


@dataclass(frozen=True)
class WindowSpec:
    """Window and hop length in samples."""
    length: int
    hop: int

    def __post_init__(self):
        if self.length < 1 or self.hop < 1:
            raise InvalidInputError(
                f"Window spec needs length >= 1 and hop >= 1, got ({self.length}, {self.hop})"
            )

    @classmethod
    def from_seconds(cls, window_sec: float, hop_sec: float, sample_rate: int) -> 'WindowSpec':
        """Round seconds x sample_rate down, floored at one sample."""
        validate_sample_rate(sample_rate)
        if not window_sec > 0 or not hop_sec > 0:
            raise InvalidInputError(
                f"window and hop must be positive seconds, got window={window_sec}, hop={hop_sec}"
            )
        return cls(
            length=max(1, int(math.floor(window_sec * sample_rate))),
            hop=max(1, int(math.floor(hop_sec * sample_rate))),
        )


@dataclass
class MeterConfig:
    """Configuration for batch and streaming loudness measurement."""
    momentary_window_sec: float = 0.4
    short_term_window_sec: float = 3.0
    hop_sec: float = 0.1
    k_offset_db: float = -0.691
    absolute_gate_lufs: float = -70.0
    relative_gate_lu: float = 10.0
    lra_gate_lu: float = 20.0
    oversample: int = 4
    true_peak_source: str = "weighted"
    max_history_blocks: Optional[int] = None
    stream_block_size: int = 128

    def __post_init__(self):
        for name in ("momentary_window_sec", "short_term_window_sec", "hop_sec"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or not value > 0:
                raise InvalidInputError(f"{name} must be a positive number, got {value!r}")
        if int(self.oversample) < 1:
            raise InvalidInputError(f"oversample must be >= 1, got {self.oversample}")
        if self.true_peak_source not in TRUE_PEAK_SOURCES:
            raise InvalidInputError(
                f"true_peak_source must be one of {', '.join(TRUE_PEAK_SOURCES)}, "
                f"got {self.true_peak_source!r}"
            )
        if self.max_history_blocks is not None and self.max_history_blocks < 1:
            raise InvalidInputError(
                f"max_history_blocks must be None or >= 1, got {self.max_history_blocks}"
            )
        if self.stream_block_size < 1:
            raise InvalidInputError(f"stream_block_size must be >= 1, got {self.stream_block_size}")

    def window_specs(self, sample_rate: int) -> Tuple[WindowSpec, WindowSpec]:
        """Return (momentary, short_term) window specs sharing the configured hop."""
        return (
            WindowSpec.from_seconds(self.momentary_window_sec, self.hop_sec, sample_rate),
            WindowSpec.from_seconds(self.short_term_window_sec, self.hop_sec, sample_rate),
        )

    @classmethod
    def from_settings(cls, settings: Dict[str, Any]) -> 'MeterConfig':
        """Create MeterConfig from a settings dictionary with an optional "meter" section."""
        meter_cfg = settings.get("meter", {}) or {}
        streaming_cfg = meter_cfg.get("streaming", {}) or {}
        defaults = cls()
        max_history = streaming_cfg.get("max_history_blocks", meter_cfg.get("max_history_blocks"))

        return cls(
            momentary_window_sec=float(meter_cfg.get("momentary_window_sec", defaults.momentary_window_sec)),
            short_term_window_sec=float(meter_cfg.get("short_term_window_sec", defaults.short_term_window_sec)),
            hop_sec=float(meter_cfg.get("hop_sec", defaults.hop_sec)),
            k_offset_db=float(meter_cfg.get("k_offset_db", defaults.k_offset_db)),
            absolute_gate_lufs=float(meter_cfg.get("absolute_gate_lufs", defaults.absolute_gate_lufs)),
            relative_gate_lu=float(meter_cfg.get("relative_gate_lu", defaults.relative_gate_lu)),
            lra_gate_lu=float(meter_cfg.get("lra_gate_lu", defaults.lra_gate_lu)),
            oversample=int(meter_cfg.get("oversample", defaults.oversample)),
            true_peak_source=str(meter_cfg.get("true_peak_source", defaults.true_peak_source)),
            max_history_blocks=int(max_history) if max_history is not None else None,
            stream_block_size=int(streaming_cfg.get("block_size", defaults.stream_block_size)),
        )

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> 'MeterConfig':
        with open(path, "r", encoding="utf-8") as f:
            settings = json.load(f)
        return cls.from_settings(settings)
