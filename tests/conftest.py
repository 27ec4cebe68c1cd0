"""
Pytest configuration and shared fixtures.

Provides engine configurations and deterministic random sources for unit and
integration tests.
"""

from typing import Dict

import pytest

from vitalsync.core.config import EngineConfig, SignalConfig
from vitalsync.engine import VitalSignEngine
from vitalsync.signals.randomness import FixedSequenceRandomSource, SeededRandomSource
from vitalsync.signals.schema import Signal


@pytest.fixture
def engine_settings() -> EngineConfig:
    """
    Fixture providing the default engine configuration.

    Built explicitly (not from the global config) so tests are unaffected by
    environment overrides.
    """
    return EngineConfig()


@pytest.fixture
def zero_noise_rng() -> FixedSequenceRandomSource:
    """
    Fixture providing a random source whose Gaussian draws are exactly zero.

    Every uniform draw is 1.0, so Box-Muller yields sqrt(-2 ln 1) = 0 and
    uniform_int always returns its upper bound.
    """
    return FixedSequenceRandomSource([1.0])


@pytest.fixture
def seeded_rng() -> SeededRandomSource:
    """Fixture providing a reproducible pseudo-random source."""
    return SeededRandomSource(seed=1234)


@pytest.fixture
def quiet_settings(engine_settings: EngineConfig) -> EngineConfig:
    """
    Fixture providing a configuration with zero variance on every signal and
    anomaly episodes pushed beyond any test horizon.
    """
    signals: Dict[str, SignalConfig] = {
        name: settings.model_copy(update={"variance": 0.0})
        for name, settings in engine_settings.signals.items()
    }
    anomaly = engine_settings.anomaly.model_copy(update={"first_trigger_tick": 10_000})
    return engine_settings.model_copy(update={"signals": signals, "anomaly": anomaly})


@pytest.fixture
def signals(engine_settings: EngineConfig) -> Dict[str, Signal]:
    """Fixture providing fresh Signal objects (value at baseline, empty history)."""
    return {
        name: Signal.from_config(
            name,
            settings,
            history_capacity=engine_settings.chart_capacity,
            trend_capacity=(
                engine_settings.trend_capacity if name in engine_settings.trend_signals else None
            ),
        )
        for name, settings in engine_settings.signals.items()
    }


@pytest.fixture
def zero_noise_engine(engine_settings: EngineConfig, zero_noise_rng) -> VitalSignEngine:
    """Fixture providing an initialized engine with default config and zero noise."""
    engine = VitalSignEngine(engine_settings, rng=zero_noise_rng)
    engine.initialize()
    return engine


def pytest_configure(config):
    """
    Pytest hook for custom configuration.

    Registers custom markers used throughout tests.
    """
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running (deferred CI)"
    )
