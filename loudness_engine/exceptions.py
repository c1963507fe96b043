"""
Custom exception classes for the loudness engine.

Silence and near-silence are not errors: negative-infinity loudness, zero
LRA/DR and NaN percentiles are returned as ordinary values.
"""


class LoudnessEngineError(Exception):
    """Base exception for all loudness engine errors."""
    pass


class InvalidInputError(LoudnessEngineError, ValueError):
    """Raised for mismatched channel lengths, bad sample rates, window or block shapes."""
    pass


class StreamStateError(InvalidInputError):
    """Raised when a stream is fed or started in the wrong state."""
    pass


__all__ = ['LoudnessEngineError', 'InvalidInputError', 'StreamStateError']
