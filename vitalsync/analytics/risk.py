"""
Composite risk scoring.

Each category is a weighted sum of relative baseline deviations and absolute
correlation coefficients, scaled and clamped to [floor, ceiling]. The displayed
value follows the target with first-order exponential smoothing:

    value_n+1 = value_n + (target - value_n) * smoothing

so a constant target is approached geometrically with ratio (1 - smoothing).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from math import floor
from typing import Dict, Iterable, List, Mapping, Tuple

from pydantic import BaseModel, ConfigDict, Field

from vitalsync.core.config import FactorRuleConfig, RiskCategoryConfig, RiskTermConfig
from vitalsync.core.exceptions import ConfigurationError
from vitalsync.signals.schema import Signal

from .correlation import CorrelationMatrix

logger = logging.getLogger(__name__)


class RiskLevel(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    ELEVATED = "elevated"


class RiskDirection(str, Enum):
    RISING = "rising"
    FALLING = "falling"
    STABLE = "stable"


def round_half_up(value: float) -> int:
    return int(floor(value + 0.5))


def risk_level(value: float, moderate: float = 20.0, elevated: float = 40.0) -> RiskLevel:
    if value < moderate:
        return RiskLevel.LOW
    if value < elevated:
        return RiskLevel.MODERATE
    return RiskLevel.ELEVATED


def risk_direction(value: float, target: float, tolerance: float = 2.0) -> RiskDirection:
    """Where the smoothed value is heading: toward a target above or below it."""
    if target > value + tolerance:
        return RiskDirection.RISING
    if target < value - tolerance:
        return RiskDirection.FALLING
    return RiskDirection.STABLE


def term_input(term: RiskTermConfig, signals: Mapping[str, Signal], matrix: CorrelationMatrix) -> float:
    """Raw (unweighted) input of a term: a relative deviation or |correlation|."""
    if term.kind == "deviation":
        return signals[term.signals[0]].relative_deviation
    return abs(matrix.get(term.signals[0], term.signals[1]))


def factor_label(rule: FactorRuleConfig, value: float) -> str:
    """Render a factor as "<title>: <band label>"."""
    for bound, label in rule.bands:
        if value < bound or (rule.inclusive and value == bound):
            return f"{rule.title}: {label}"
    return f"{rule.title}: {rule.otherwise}"


class RiskSnapshot(BaseModel):
    """
    Read-only view of a risk category after a completed tick.

    Fields:
    - value: smoothed score in [0, 100]
    - target: instantaneous score in [floor, ceiling]
    - display_value/display_target: half-up rounded integers for display
    - factors: ordered qualitative labels
    - level: low/moderate/elevated from the smoothed value
    - direction: rising/falling/stable relative to the target
    """

    model_config = ConfigDict(frozen=True)

    name: str
    value: float = Field(ge=0.0, le=100.0)
    target: float = Field(ge=0.0, le=100.0)
    display_value: int
    display_target: int
    factors: Tuple[str, ...]
    level: RiskLevel
    direction: RiskDirection


@dataclass
class RiskCategory:
    """
    Mutable scoring state of one category.

    `value` carries the smoothing state between ticks; `target` and `factors`
    are rebuilt on every recompute.
    """

    name: str
    settings: RiskCategoryConfig
    value: float = 0.0
    target: float = 0.0
    factors: List[str] = field(default_factory=list)

    @classmethod
    def from_config(cls, name: str, settings: RiskCategoryConfig) -> "RiskCategory":
        return cls(
            name=name,
            settings=settings,
            value=settings.initial_value,
            target=settings.initial_value,
        )

    def compute_target(self, signals: Mapping[str, Signal], matrix: CorrelationMatrix) -> float:
        weighted = sum(term.weight * term_input(term, signals, matrix) for term in self.settings.terms)
        score = weighted * self.settings.scale
        return min(max(score, self.settings.floor), self.settings.ceiling)

    def compute_factors(self, signals: Mapping[str, Signal], matrix: CorrelationMatrix) -> List[str]:
        return [
            factor_label(rule, term_input(rule.term, signals, matrix))
            for rule in self.settings.factors
        ]

    def smooth(self, smoothing: float) -> float:
        self.value = self.value + (self.target - self.value) * smoothing
        return self.value

    def snapshot(self) -> RiskSnapshot:
        return RiskSnapshot(
            name=self.name,
            value=self.value,
            target=self.target,
            display_value=round_half_up(self.value),
            display_target=round_half_up(self.target),
            factors=tuple(self.factors),
            level=risk_level(self.value),
            direction=risk_direction(self.value, self.target),
        )


class RiskEngine:
    """
    Recomputes every risk category from current signals and correlations.

    Notes:
    - Targets are kept unrounded; smoothing runs on the exact target.
    - Category order follows the configuration order.
    """

    def __init__(self, categories: Mapping[str, RiskCategoryConfig], smoothing: float = 0.1) -> None:
        self.smoothing = smoothing
        self.categories: Dict[str, RiskCategory] = {
            name: RiskCategory.from_config(name, settings) for name, settings in categories.items()
        }

    def validate(self, signal_names: Iterable[str], matrix_signals: Iterable[str]) -> None:
        """Raise ConfigurationError if any term references an unavailable input."""
        known = set(signal_names)
        in_matrix = set(matrix_signals)
        for category in self.categories.values():
            terms = list(category.settings.terms) + [rule.term for rule in category.settings.factors]
            for term in terms:
                pool = known if term.kind == "deviation" else in_matrix
                missing = [s for s in term.signals if s not in pool]
                if missing:
                    raise ConfigurationError(
                        f"Risk category '{category.name}' references unknown "
                        f"{term.kind} signal(s): {', '.join(missing)}"
                    )
            if category.settings.floor > category.settings.ceiling:
                raise ConfigurationError(
                    f"Risk category '{category.name}' floor exceeds ceiling"
                )

    def recompute(self, signals: Mapping[str, Signal], matrix: CorrelationMatrix) -> List[RiskCategory]:
        for category in self.categories.values():
            category.target = category.compute_target(signals, matrix)
            category.factors = category.compute_factors(signals, matrix)
            category.smooth(self.smoothing)
            logger.debug(
                "Risk %s: target=%.2f value=%.2f", category.name, category.target, category.value
            )
        return list(self.categories.values())

    def snapshot(self) -> Dict[str, RiskSnapshot]:
        return {name: category.snapshot() for name, category in self.categories.items()}
