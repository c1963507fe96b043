"""
Cross-check against pyloudnorm's BS.1770 implementation.
"""
import pyloudnorm as pyln

from loudness_engine.exceptions import InvalidInputError
from loudness_engine.signal import MultichannelSignal


def reference_integrated_loudness(signal: MultichannelSignal, block_size: float = 0.4) -> float:
    """
    Integrated loudness of the raw signal as measured by pyloudnorm.

    pyloudnorm applies the standard K-weighting curve and channel weights, so
    small differences against measure() are expected.

    Raises:
        InvalidInputError: If the signal is not longer than one gating block
    """
    if signal.duration <= block_size:
        raise InvalidInputError(
            f"Reference needs more than {block_size}s of audio, got {signal.duration:.3f}s"
        )
    meter = pyln.Meter(signal.sample_rate, block_size=block_size)
    # pyloudnorm expects (samples, channels)
    return float(meter.integrated_loudness(signal.channels.T))
