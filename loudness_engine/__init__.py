"""
Loudness measurement engine (ITU-R BS.1770 / EBU R128 approximation).
"""

from .config import MeterConfig, WindowSpec
from .exceptions import InvalidInputError, LoudnessEngineError, StreamStateError
from .meter import LoudnessResult, measure, summarize
from .signal import MultichannelSignal
from .streaming import LoudnessStream, StreamState, create_stream, feed, stop

__all__ = [
    "MeterConfig",
    "WindowSpec",
    "InvalidInputError",
    "LoudnessEngineError",
    "StreamStateError",
    "LoudnessResult",
    "measure",
    "summarize",
    "MultichannelSignal",
    "LoudnessStream",
    "StreamState",
    "create_stream",
    "feed",
    "stop",
]
