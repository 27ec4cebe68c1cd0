"""
Injectable random sources for the simulation.

The engine never touches the global `random` module directly. Every draw goes
through a RandomSource so seeded or fixed-sequence sources can make runs
reproducible in tests.
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from itertools import cycle
from math import cos, log, pi, sqrt
from typing import Iterable, Optional


class RandomSource(ABC):
    """
    Abstract source of uniform draws with derived Gaussian/integer draws.

    Subclasses implement `uniform()` only.
    """

    @abstractmethod
    def uniform(self) -> float:
        """Return a draw in [0, 1]."""

    def gaussian(self) -> float:
        """
        Standard-normal draw via the Box-Muller transform.

        Both uniforms are redrawn while exactly zero so log() stays finite.
        """
        u = 0.0
        while u == 0.0:
            u = self.uniform()
        v = 0.0
        while v == 0.0:
            v = self.uniform()
        return sqrt(-2.0 * log(u)) * cos(2.0 * pi * v)

    def uniform_int(self, low: int, high: int) -> int:
        """Integer in [low, high] inclusive."""
        if high < low:
            raise ValueError(f"Empty integer range [{low}, {high}]")
        span = high - low + 1
        return low + min(int(self.uniform() * span), span - 1)


class SeededRandomSource(RandomSource):
    """Pseudo-random source backed by `random.Random`; seed=None is nondeterministic."""

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = random.Random(seed)

    def uniform(self) -> float:
        return self._rng.random()


class FixedSequenceRandomSource(RandomSource):
    """
    Replays a fixed, cycling sequence of uniform values.

    A sequence of 1.0 makes every Gaussian draw exactly zero
    (sqrt(-2 ln 1) == 0) while uniform_int returns its upper bound.
    The sequence must hold at least one non-zero value so Gaussian draws terminate.
    """

    def __init__(self, values: Iterable[float]) -> None:
        values = [float(v) for v in values]
        if not values:
            raise ValueError("FixedSequenceRandomSource needs at least one value")
        for value in values:
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"Uniform value out of range: {value}")
        if not any(values):
            raise ValueError("FixedSequenceRandomSource needs a non-zero value for Gaussian draws")
        self._values = cycle(values)

    def uniform(self) -> float:
        return next(self._values)
