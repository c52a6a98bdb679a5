"""Millisecond helpers: clamping and MM:SS.d formatting."""

import math


def clamp_ms(value: float, lo: float, hi: float) -> float:
    """Clamp ``value`` into [lo, hi]. Callers guarantee ``lo <= hi``."""
    return max(lo, min(hi, value))


def format_ms(ms: float) -> str:
    """Format milliseconds as ``MM:SS.d``, rounding half-up to 0.1 s."""
    tenths = math.floor(ms / 100 + 0.5)
    minutes, rem = divmod(tenths, 600)
    return f"{minutes:02d}:{rem // 10:02d}.{rem % 10}"
