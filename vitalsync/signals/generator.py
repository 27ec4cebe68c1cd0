"""
Per-tick stochastic signal generator.

Each tick a signal moves by four additive components:
- slow circadian oscillation
- Gaussian noise scaled by the signal's variance
- mean reversion toward baseline
- during an anomaly episode, a correlated drift from the drift table

The result is clamped to [min, max], rounded, and recorded into the
signal's bounded history (and trend, when tracked).
"""

from __future__ import annotations

from dataclasses import dataclass
from math import sin
from typing import Dict, Optional

from vitalsync.anomaly.schema import AnomalyState
from vitalsync.core.config import DriftConfig, EngineConfig

from .randomness import RandomSource
from .schema import Signal


@dataclass
class SignalGenerator:
    """
    Advances one Signal by one tick.

    The generator itself is stateless apart from its configuration and random
    source; all mutable state lives on the Signal being advanced.
    """

    settings: EngineConfig
    rng: RandomSource
    drift: Optional[Dict[str, DriftConfig]] = None

    def __post_init__(self) -> None:
        if self.drift is None:
            self.drift = dict(self.settings.drift)

    def advance(self, signal: Signal, tick: int, anomaly: Optional[AnomalyState] = None) -> float:
        circadian = (
            sin(tick * self.settings.circadian_frequency)
            * signal.variance
            * self.settings.circadian_amplitude
        )
        noise = self.rng.gaussian() * signal.variance
        reversion = (signal.baseline - signal.value) * self.settings.reversion_rate

        value = signal.value + reversion + circadian * self.settings.circadian_weight + noise

        if anomaly is not None and anomaly.active:
            value += self._drift(signal.name, anomaly.severity(tick, self.settings.anomaly.ramp_ticks))

        value = round(signal.clamp(value), self.settings.decimals)
        signal.record(value)
        return value

    def seed(self, signal: Signal) -> None:
        """
        Pre-fill history and trend around baseline so windowed statistics
        have data from the first tick. No anomaly influence; value is untouched.
        """
        spread = signal.variance * self.settings.seed_noise_factor
        for _ in range(self.settings.history_seed_samples):
            signal.history.append(self._seed_sample(signal, spread))
        if signal.trend is not None:
            for _ in range(self.settings.trend_seed_samples):
                signal.trend.append(self._seed_sample(signal, spread))

    def _seed_sample(self, signal: Signal, spread: float) -> float:
        sample = signal.baseline + self.rng.gaussian() * spread
        return round(signal.clamp(sample), self.settings.decimals)

    def _drift(self, name: str, severity: float) -> float:
        descriptor = self.drift.get(name)
        if descriptor is None:
            return 0.0
        jitter = self.rng.gaussian()
        if descriptor.rectified:
            jitter = abs(jitter)
        return descriptor.direction * (severity * descriptor.magnitude + jitter * descriptor.noise_scale)
