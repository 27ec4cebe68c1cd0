"""
Simulation engine orchestrator.

Owns the tick counter, every signal, the analytics engines, the anomaly state
machine and the event log. A tick runs the whole pipeline synchronously:

    anomaly transition -> signal generation -> correlation -> risk -> snapshot

Only completed ticks are observable: callers receive an immutable
EngineSnapshot and never the engine's mutable internals.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from vitalsync.analytics.correlation import CorrelationEngine, CorrelationMatrix
from vitalsync.analytics.risk import RiskEngine, RiskSnapshot
from vitalsync.anomaly.event_log import AnomalyEventLog
from vitalsync.anomaly.schema import AnomalyEvent, AnomalyState, AnomalyStats, EventSeverity, EventStatus
from vitalsync.anomaly.state_machine import AnomalyStateMachine
from vitalsync.core.config import EngineConfig, config
from vitalsync.core.exceptions import ConfigurationError, EngineStateError
from vitalsync.signals.generator import SignalGenerator
from vitalsync.signals.randomness import RandomSource, SeededRandomSource
from vitalsync.signals.schema import Signal, SignalSnapshot, snapshot_signal

logger = logging.getLogger(__name__)

INIT_TITLE = "System Initialized — Correlation Monitoring Active"
INIT_DESCRIPTION = (
    "Multi-signal correlation engine is online. Monitoring {count} physiological signals "
    "with real-time cross-correlation analysis. Early-stage risk prediction active."
)
INIT_TAGS = ("System", "All Signals", "Baseline Set")


class AnomalySnapshot(BaseModel):
    """Anomaly-mode state plus the drift severity in effect for the tick."""

    model_config = ConfigDict(frozen=True)

    state: AnomalyState
    severity: float


class EngineSnapshot(BaseModel):
    """
    Immutable output of one completed tick.

    Fields:
    - tick: simulation tick the snapshot belongs to (0 after initialize)
    - signals: per-signal snapshots in configuration order
    - correlations: full correlation matrix
    - risks: risk categories in configuration order
    - anomaly: anomaly-mode state and current severity
    - events: event log contents, newest first
    - stats: aggregate event statistics
    """

    model_config = ConfigDict(frozen=True)

    tick: int
    signals: Dict[str, SignalSnapshot]
    correlations: CorrelationMatrix
    risks: Dict[str, RiskSnapshot]
    anomaly: AnomalySnapshot
    events: Tuple[AnomalyEvent, ...]
    stats: AnomalyStats


class VitalSignEngine:
    """
    Deterministic-when-seeded vital-sign simulation engine.

    Notes:
    - settings defaults to the global config's engine section.
    - rng defaults to a SeededRandomSource using config.random_seed.
    - Independent instances share no state.
    """

    def __init__(
        self,
        settings: Optional[EngineConfig] = None,
        rng: Optional[RandomSource] = None,
    ) -> None:
        self.settings = settings or config.engine
        self.rng = rng or SeededRandomSource(config.random_seed)
        self._validate()

        self._tick = 0
        self._initialized = False

        self.signals: Dict[str, Signal] = {
            name: Signal.from_config(
                name,
                signal_settings,
                history_capacity=self.settings.chart_capacity,
                trend_capacity=(
                    self.settings.trend_capacity if name in self.settings.trend_signals else None
                ),
            )
            for name, signal_settings in self.settings.signals.items()
        }
        self.generator = SignalGenerator(self.settings, self.rng)
        self.correlation_engine = CorrelationEngine(
            signal_names=tuple(self.settings.correlation_signals),
            min_samples=self.settings.min_correlation_samples,
        )
        self.risk_engine = RiskEngine(self.settings.risks, smoothing=self.settings.smoothing)
        self.risk_engine.validate(self.settings.signals, self.settings.correlation_signals)
        self.event_log = AnomalyEventLog(capacity=self.settings.event_log_capacity)
        self.anomaly = AnomalyStateMachine(self.settings.anomaly, self.rng, self.event_log)
        self.correlations = CorrelationMatrix.empty(self.settings.correlation_signals)

    @property
    def tick_count(self) -> int:
        return self._tick

    @property
    def anomaly_state(self) -> AnomalyState:
        return self.anomaly.state

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> EngineSnapshot:
        """
        Seed histories, compute initial analytics, and log the start-up event.

        Raises:
            EngineStateError: if called twice on the same engine
        """
        if self._initialized:
            raise EngineStateError("Engine is already initialized")

        for signal in self.signals.values():
            self.generator.seed(signal)
        self._recompute_analytics()
        self.event_log.record(
            tick=self._tick,
            title=INIT_TITLE,
            description=INIT_DESCRIPTION.format(count=len(self.settings.correlation_signals)),
            tags=INIT_TAGS,
            severity=EventSeverity.LOW,
            status=EventStatus.INFO,
        )
        self._initialized = True
        logger.info(
            "Engine initialized: %d signals, first anomaly at tick %s",
            len(self.signals),
            self.anomaly.state.next_trigger_tick,
        )
        return self.snapshot()

    def tick(self) -> EngineSnapshot:
        """Advance simulated time by one step and return the resulting snapshot."""
        self._require_initialized()
        self._tick += 1
        tick = self._tick

        self.anomaly.maybe_trigger(tick)
        state = self.anomaly.state
        for signal in self.signals.values():
            self.generator.advance(signal, tick, state)

        self._recompute_analytics()

        logger.debug(
            "Tick %d: anomaly=%s %s",
            tick,
            state.active,
            ", ".join(f"{name}={s.value}" for name, s in self.signals.items()),
        )
        return self.snapshot()

    def run(self, ticks: int) -> EngineSnapshot:
        """Run `ticks` ticks (initializing first if needed) and return the last snapshot."""
        if ticks < 0:
            raise ValueError("ticks must be non-negative")
        snapshot = self.snapshot() if self._initialized else self.initialize()
        for _ in range(ticks):
            snapshot = self.tick()
        return snapshot

    def snapshot(self) -> EngineSnapshot:
        self._require_initialized()
        settings = self.settings
        return EngineSnapshot(
            tick=self._tick,
            signals={
                name: snapshot_signal(
                    signal,
                    watch=settings.status_watch,
                    alert=settings.status_alert,
                    trend_window=settings.trend_window,
                    stable_pct=settings.trend_stable_pct,
                )
                for name, signal in self.signals.items()
            },
            correlations=self.correlations.model_copy(deep=True),
            risks=self.risk_engine.snapshot(),
            anomaly=AnomalySnapshot(
                state=self.anomaly.state,
                severity=self.anomaly.severity(self._tick),
            ),
            events=tuple(self.event_log.events),
            stats=self.event_log.stats,
        )

    def _recompute_analytics(self) -> None:
        self.correlations = self.correlation_engine.recompute(self.signals)
        self.risk_engine.recompute(self.signals, self.correlations)

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise EngineStateError("Engine must be initialized before use; call initialize() first")

    def _validate(self) -> None:
        names = set(self.settings.signals)
        wiring = {
            "correlation_signals": self.settings.correlation_signals,
            "trend_signals": self.settings.trend_signals,
            "drift": list(self.settings.drift),
        }
        for section, entries in wiring.items():
            unknown = [name for name in entries if name not in names]
            if unknown:
                raise ConfigurationError(
                    f"{section} references unknown signal(s): {', '.join(unknown)}"
                )
