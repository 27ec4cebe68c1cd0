"""
Signals module: Vital-sign state, random sources, and the per-tick generator.
"""

from .randomness import FixedSequenceRandomSource, RandomSource, SeededRandomSource
from .schema import (
    Signal,
    SignalSnapshot,
    SignalStatus,
    TrendDirection,
    classify_status,
    snapshot_signal,
    trend_direction,
    trend_percentage,
)
from .generator import SignalGenerator

__all__ = [
    "RandomSource",
    "SeededRandomSource",
    "FixedSequenceRandomSource",
    "Signal",
    "SignalSnapshot",
    "SignalStatus",
    "TrendDirection",
    "SignalGenerator",
    "classify_status",
    "snapshot_signal",
    "trend_direction",
    "trend_percentage",
]
