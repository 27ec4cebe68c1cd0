"""
Schema definitions for simulated vital signs.

Signal is the mutable per-channel state owned by the engine and mutated only
by the generator. SignalSnapshot is the immutable view handed to renderers.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Deque, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from vitalsync.core.config import SignalConfig


class SignalStatus(str, Enum):
    """Status of a signal relative to its baseline, scaled by its range."""

    NORMAL = "normal"
    WATCH = "watch"
    ALERT = "alert"


class TrendDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


@dataclass
class Signal:
    """
    Mutable state of one simulated vital sign.

    Invariants:
    - min <= value <= max
    - len(history) <= history capacity; len(trend) <= trend capacity
    - trend is None for signals not tracked for long-range charts
    """

    name: str
    label: str
    value: float
    baseline: float
    min: float
    max: float
    variance: float
    unit: str
    history: Deque[float] = field(default_factory=deque)
    trend: Optional[Deque[float]] = None

    @classmethod
    def from_config(
        cls,
        name: str,
        settings: SignalConfig,
        history_capacity: int,
        trend_capacity: Optional[int] = None,
    ) -> "Signal":
        return cls(
            name=name,
            label=settings.label,
            value=settings.baseline,
            baseline=settings.baseline,
            min=settings.min,
            max=settings.max,
            variance=settings.variance,
            unit=settings.unit,
            history=deque(maxlen=history_capacity),
            trend=deque(maxlen=trend_capacity) if trend_capacity is not None else None,
        )

    def clamp(self, value: float) -> float:
        return min(max(value, self.min), self.max)

    def record(self, value: float) -> None:
        """Store a new current value; deques evict the oldest entries."""
        self.value = value
        self.history.append(value)
        if self.trend is not None:
            self.trend.append(value)

    @property
    def relative_deviation(self) -> float:
        """|value - baseline| / baseline (baseline > 0 by config validation)."""
        return abs(self.value - self.baseline) / self.baseline


class SignalSnapshot(BaseModel):
    """
    Read-only view of a signal after a completed tick.

    Fields:
    - value/unit/label: current sample and display metadata
    - history: bounded chart series, oldest first
    - trend: bounded long-range series (empty if the signal is not tracked)
    - status: Normal/Watch/Alert classification
    - trend_pct: % change of recent vs preceding samples (None if too little data)
    - direction: up/down/stable from trend_pct (None if too little data)
    """

    model_config = ConfigDict(frozen=True)

    name: str
    label: str
    value: float
    baseline: float
    min: float
    max: float
    unit: str
    history: Tuple[float, ...]
    trend: Tuple[float, ...]
    status: SignalStatus
    trend_pct: Optional[float] = None
    direction: Optional[TrendDirection] = None


def classify_status(signal: Signal, watch: float = 0.18, alert: float = 0.35) -> SignalStatus:
    """Classify |value - baseline| as a fraction of the signal's [min, max] range."""
    span = abs(signal.max - signal.min)
    if span == 0:
        return SignalStatus.NORMAL
    deviation = abs(signal.value - signal.baseline) / span
    if deviation > alert:
        return SignalStatus.ALERT
    if deviation > watch:
        return SignalStatus.WATCH
    return SignalStatus.NORMAL


def trend_percentage(history: List[float], window: int = 5) -> Optional[float]:
    """
    Percent change of the mean of the last `window` samples versus the mean
    of the `window` samples before them, rounded to one decimal.

    Returns None when there are fewer than `window` samples, no older samples,
    or the older mean is zero.
    """
    if len(history) < window:
        return None
    recent = history[-window:]
    older = history[-2 * window:-window]
    if not older:
        return None
    recent_avg = sum(recent) / len(recent)
    older_avg = sum(older) / len(older)
    if older_avg == 0:
        return None
    return round((recent_avg - older_avg) / older_avg * 100, 1)


def trend_direction(pct: Optional[float], threshold: float = 1.0) -> Optional[TrendDirection]:
    if pct is None:
        return None
    if pct > threshold:
        return TrendDirection.UP
    if pct < -threshold:
        return TrendDirection.DOWN
    return TrendDirection.STABLE


def snapshot_signal(
    signal: Signal,
    watch: float = 0.18,
    alert: float = 0.35,
    trend_window: int = 5,
    stable_pct: float = 1.0,
) -> SignalSnapshot:
    history = list(signal.history)
    pct = trend_percentage(history, trend_window)
    return SignalSnapshot(
        name=signal.name,
        label=signal.label,
        value=signal.value,
        baseline=signal.baseline,
        min=signal.min,
        max=signal.max,
        unit=signal.unit,
        history=tuple(history),
        trend=tuple(signal.trend) if signal.trend is not None else (),
        status=classify_status(signal, watch, alert),
        trend_pct=pct,
        direction=trend_direction(pct, stable_pct),
    )
