"""
Bounded, most-recent-first anomaly event log.
"""

from __future__ import annotations

import logging
from collections import deque
from datetime import datetime, timezone
from typing import Deque, Iterable, List

from .schema import AnomalyEvent, AnomalyStats, EventSeverity, EventStatus

logger = logging.getLogger(__name__)


class AnomalyEventLog:
    """
    Append-only event log with capacity-triggered eviction.

    New events are inserted at the front; once the log holds more than
    `capacity` events the oldest one is dropped. Statistics are recomputed
    from the stored events on every append.
    """

    def __init__(self, capacity: int = 15) -> None:
        if capacity < 1:
            raise ValueError("Event log capacity must be positive")
        self.capacity = capacity
        self._events: Deque[AnomalyEvent] = deque()
        self._next_id = 1
        self._stats = AnomalyStats()

    def append(self, event: AnomalyEvent) -> AnomalyEvent:
        self._events.appendleft(event)
        while len(self._events) > self.capacity:
            evicted = self._events.pop()
            logger.debug("Evicted event %s (%s)", evicted.event_id, evicted.title)
        self._next_id = max(self._next_id, event.event_id + 1)
        self._stats = compute_stats(self._events)
        return event

    def record(
        self,
        tick: int,
        title: str,
        description: str,
        tags: Iterable[str],
        severity: EventSeverity,
        status: EventStatus,
    ) -> AnomalyEvent:
        """Create an event with the next id and the current UTC time, then append it."""
        event = AnomalyEvent(
            event_id=self._next_id,
            tick=tick,
            created_at=datetime.now(timezone.utc),
            title=title,
            description=description,
            tags=tuple(tags),
            severity=severity,
            status=status,
        )
        logger.info("Event %s at tick %s: %s [%s]", event.event_id, tick, title, status.value)
        return self.append(event)

    @property
    def events(self) -> List[AnomalyEvent]:
        """Stored events, newest first."""
        return list(self._events)

    @property
    def stats(self) -> AnomalyStats:
        return self._stats

    def __len__(self) -> int:
        return len(self._events)


def compute_stats(events: Iterable[AnomalyEvent]) -> AnomalyStats:
    events = list(events)
    return AnomalyStats(
        total=len(events),
        critical=sum(
            1
            for e in events
            if e.severity == EventSeverity.HIGH or e.status == EventStatus.ACTIVE
        ),
        resolved=sum(1 for e in events if e.status == EventStatus.AUTO_RESOLVED),
    )
