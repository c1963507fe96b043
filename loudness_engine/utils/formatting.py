"""
Text formatting for meter readings.
"""
import math


def format_db(value: float) -> str:
    if value is None or not math.isfinite(value):
        return "-inf"
    return f"{round(value * 10) / 10:.1f}"


def format_lu(value: float) -> str:
    return format_db(value)


def format_time(seconds: float) -> str:
    """MM:SS.mmm; "--" for missing times."""
    if seconds is None or not math.isfinite(seconds):
        return "--"
    s = max(0.0, seconds)
    minutes = int(s // 60)
    secs = int(s % 60)
    millis = int(round((s - math.floor(s)) * 1000))
    if millis == 1000:
        secs, millis = secs + 1, 0
        if secs == 60:
            minutes, secs = minutes + 1, 0
    return f"{minutes:02d}:{secs:02d}.{millis:03d}"
