"""
Anomaly-mode state machine.

Schedules time-boxed synthetic episodes during which the generator injects
correlated drift into several signals:

    Idle(next_trigger_tick) --tick >= next_trigger_tick--> Active(start_tick)
    Active(start_tick) --tick - start_tick > episode_ticks--> Idle(next)

Episodes end on elapsed time only, never on signal values. Each transition
records exactly one event in the event log.
"""

from __future__ import annotations

import logging
from typing import Optional

from vitalsync.core.config import AnomalyScheduleConfig
from vitalsync.signals.randomness import RandomSource

from .event_log import AnomalyEventLog
from .schema import AnomalyEvent, AnomalyState, EventSeverity, EventStatus

logger = logging.getLogger(__name__)

ONSET_TITLE = "Multi-Signal Correlation Divergence Detected"
ONSET_DESCRIPTION = (
    "HR-SpO2 inverse correlation strengthening while HRV is declining. "
    "This pattern may indicate early-stage autonomic stress response. Monitoring closely."
)
ONSET_TAGS = ("HR↔SpO2", "HRV Decline", "Correlation Shift")

RESOLVED_TITLE = "Multi-Signal Pattern Normalized"
RESOLVED_DESCRIPTION = (
    "Correlation patterns have returned to baseline. "
    "The transient divergence resolved without intervention."
)
RESOLVED_TAGS = ("HR", "SpO2", "HRV")


class AnomalyStateMachine:
    """
    Tracks whether an anomaly episode is running and when the next one starts.

    Notes:
    - Initial state is Idle with next_trigger_tick = schedule.first_trigger_tick.
    - maybe_trigger() is called once per tick before signals are advanced.
    """

    def __init__(
        self,
        schedule: AnomalyScheduleConfig,
        rng: RandomSource,
        event_log: AnomalyEventLog,
    ) -> None:
        self.schedule = schedule
        self.rng = rng
        self.event_log = event_log
        self._state = AnomalyState.idle(schedule.first_trigger_tick)

    @property
    def state(self) -> AnomalyState:
        return self._state

    @property
    def active(self) -> bool:
        return self._state.active

    def severity(self, tick: int) -> float:
        return self._state.severity(tick, self.schedule.ramp_ticks)

    def maybe_trigger(self, tick: int) -> Optional[AnomalyEvent]:
        """
        Apply at most one transition for `tick`.

        Returns the recorded event, or None when the state did not change.
        """
        if self._state.active:
            if self._state.elapsed(tick) > self.schedule.episode_ticks:
                return self._resolve(tick)
            return None

        if tick >= self._state.next_trigger_tick:
            return self._activate(tick)
        return None

    def _activate(self, tick: int) -> AnomalyEvent:
        self._state = AnomalyState.running(tick)
        logger.info("Anomaly episode started at tick %s", tick)
        return self.event_log.record(
            tick=tick,
            title=ONSET_TITLE,
            description=ONSET_DESCRIPTION,
            tags=ONSET_TAGS,
            severity=EventSeverity.MEDIUM,
            status=EventStatus.ACTIVE,
        )

    def _resolve(self, tick: int) -> AnomalyEvent:
        jitter = self.rng.uniform_int(0, self.schedule.retrigger_jitter - 1)
        next_tick = tick + self.schedule.retrigger_offset + jitter
        started = self._state.start_tick
        self._state = AnomalyState.idle(next_tick)
        logger.info(
            "Anomaly episode from tick %s resolved at tick %s; next at tick %s",
            started,
            tick,
            next_tick,
        )
        return self.event_log.record(
            tick=tick,
            title=RESOLVED_TITLE,
            description=RESOLVED_DESCRIPTION,
            tags=RESOLVED_TAGS,
            severity=EventSeverity.LOW,
            status=EventStatus.AUTO_RESOLVED,
        )
