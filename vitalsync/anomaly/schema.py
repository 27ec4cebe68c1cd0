"""
Schema definitions for synthetic anomaly episodes and their event log.

Events are immutable once created. Aggregate statistics are derived from the
log contents and never updated incrementally.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class EventSeverity(str, Enum):
    """Severity levels for logged events."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class EventStatus(str, Enum):
    """Lifecycle status carried by a logged event."""

    INFO = "info"
    ACTIVE = "active"
    AUTO_RESOLVED = "auto-resolved"


class AnomalyState(BaseModel):
    """
    Anomaly-mode state.

    Fields:
    - active: True while an episode is running
    - start_tick: tick the running episode started (None when idle)
    - next_trigger_tick: tick the next episode starts (None when active)
    """

    model_config = ConfigDict(frozen=True)

    active: bool = False
    start_tick: Optional[int] = None
    next_trigger_tick: Optional[int] = None

    @classmethod
    def idle(cls, next_trigger_tick: int) -> "AnomalyState":
        return cls(active=False, next_trigger_tick=next_trigger_tick)

    @classmethod
    def running(cls, start_tick: int) -> "AnomalyState":
        return cls(active=True, start_tick=start_tick)

    def elapsed(self, tick: int) -> int:
        if not self.active or self.start_tick is None:
            return 0
        return tick - self.start_tick

    def severity(self, tick: int, ramp_ticks: int = 15) -> float:
        """Linear 0 -> 1 ramp over ramp_ticks elapsed ticks; 0 when idle."""
        if not self.active:
            return 0.0
        return min(self.elapsed(tick) / ramp_ticks, 1.0)


class AnomalyEvent(BaseModel):
    """
    Immutable record of an anomaly lifecycle or system event.

    Fields:
    - event_id: monotonic identifier assigned by the log
    - tick: simulation tick at creation
    - created_at: UTC wall-clock time at creation
    - title/description: human-readable text
    - tags: ordered short labels
    - severity: low | medium | high
    - status: info | active | auto-resolved
    """

    model_config = ConfigDict(frozen=True)

    event_id: int = Field(ge=1)
    tick: int = Field(ge=0)
    created_at: datetime
    title: str
    description: str
    tags: Tuple[str, ...] = ()
    severity: EventSeverity
    status: EventStatus


class AnomalyStats(BaseModel):
    """
    Aggregate statistics over the events currently held by the log.

    - total: number of stored events
    - critical: events with severity high or status active
    - resolved: events with status auto-resolved
    """

    model_config = ConfigDict(frozen=True)

    total: int = Field(0, ge=0)
    critical: int = Field(0, ge=0)
    resolved: int = Field(0, ge=0)
