"""
Streaming loudness measurement over block deliveries.
"""

from .engine import LoudnessStream, StreamState, create_stream, feed, stop
from .ring_buffer import RingBuffer

__all__ = [
    "LoudnessStream",
    "StreamState",
    "create_stream",
    "feed",
    "stop",
    "RingBuffer",
]
