"""
Rolling cross-correlation between tracked signals.

The matrix is rebuilt from the signals' current rolling histories every tick;
nothing is cached between ticks.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from math import sqrt
from typing import Dict, Mapping, Sequence, Tuple

from pydantic import BaseModel, ConfigDict

from vitalsync.signals.schema import Signal


class CorrelationBand(str, Enum):
    """Qualitative band of a correlation coefficient."""

    STRONG_POSITIVE = "strong_positive"
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"
    STRONG_NEGATIVE = "strong_negative"


def pearson_correlation(x: Sequence[float], y: Sequence[float], min_samples: int = 5) -> float:
    """
    Pearson correlation of the most-recent-aligned overlap of two series.

    Both series are truncated to the shorter length, keeping their latest
    samples. Returns 0.0 when the overlap is below `min_samples` or either
    series has zero variance. The result is clipped into [-1, 1].
    """
    n = min(len(x), len(y))
    if n < min_samples:
        return 0.0

    xs = list(x)[-n:]
    ys = list(y)[-n:]
    mean_x = sum(xs) / n
    mean_y = sum(ys) / n

    num = 0.0
    ss_x = 0.0
    ss_y = 0.0
    for xv, yv in zip(xs, ys):
        dx = xv - mean_x
        dy = yv - mean_y
        num += dx * dy
        ss_x += dx * dx
        ss_y += dy * dy

    denom = sqrt(ss_x * ss_y)
    if denom == 0:
        return 0.0
    return min(max(num / denom, -1.0), 1.0)


def correlation_band(value: float) -> CorrelationBand:
    if value >= 0.7:
        return CorrelationBand.STRONG_POSITIVE
    if value >= 0.3:
        return CorrelationBand.POSITIVE
    if value >= -0.3:
        return CorrelationBand.NEUTRAL
    if value >= -0.7:
        return CorrelationBand.NEGATIVE
    return CorrelationBand.STRONG_NEGATIVE


class CorrelationMatrix(BaseModel):
    """
    Square matrix of pairwise coefficients over an ordered signal subset.

    Fields:
    - signals: row/column order
    - values: values[a][b] = corr(a, b); diagonal entries are exactly 1.0
    """

    model_config = ConfigDict(frozen=True)

    signals: Tuple[str, ...]
    values: Dict[str, Dict[str, float]]

    def get(self, a: str, b: str) -> float:
        """Coefficient for (a, b); 0.0 for pairs outside the matrix."""
        return self.values.get(a, {}).get(b, 0.0)

    def band(self, a: str, b: str) -> CorrelationBand:
        return correlation_band(self.get(a, b))

    def pairs(self) -> Dict[Tuple[str, str], float]:
        return {(a, b): self.values[a][b] for a in self.signals for b in self.signals}

    @classmethod
    def empty(cls, signals: Sequence[str]) -> "CorrelationMatrix":
        return cls(
            signals=tuple(signals),
            values={a: {b: 1.0 if a == b else 0.0 for b in signals} for a in signals},
        )


@dataclass
class CorrelationEngine:
    """
    Computes the full correlation matrix over a fixed ordered signal subset.
    """

    signal_names: Tuple[str, ...]
    min_samples: int = 5

    def recompute(self, signals: Mapping[str, Signal]) -> CorrelationMatrix:
        values: Dict[str, Dict[str, float]] = {}
        for a in self.signal_names:
            row: Dict[str, float] = {}
            for b in self.signal_names:
                if a == b:
                    row[b] = 1.0
                else:
                    row[b] = pearson_correlation(
                        signals[a].history, signals[b].history, self.min_samples
                    )
            values[a] = row
        return CorrelationMatrix(signals=self.signal_names, values=values)
