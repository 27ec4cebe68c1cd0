"""
Unit tests for the bounded anomaly event log.
"""

from datetime import datetime, timezone

import pytest

from vitalsync.anomaly.event_log import AnomalyEventLog, compute_stats
from vitalsync.anomaly.schema import AnomalyEvent, EventSeverity, EventStatus


def _record(log: AnomalyEventLog, tick: int, severity=EventSeverity.LOW, status=EventStatus.INFO):
    return log.record(
        tick=tick,
        title=f"event-{tick}",
        description="synthetic",
        tags=["A", "B"],
        severity=severity,
        status=status,
    )


def test_newest_first_with_monotonic_ids():
    log = AnomalyEventLog()
    first = _record(log, 1)
    second = _record(log, 2)

    assert [e.event_id for e in log.events] == [second.event_id, first.event_id]
    assert second.event_id > first.event_id
    assert first.tags == ("A", "B")
    assert first.created_at.tzinfo is not None


def test_capacity_evicts_oldest():
    log = AnomalyEventLog(capacity=15)
    for tick in range(1, 16):
        _record(log, tick)
    assert len(log) == 15

    newest = _record(log, 16)

    assert len(log) == 15
    assert log.events[0] == newest
    assert log.events[-1].tick == 2
    assert all(e.tick != 1 for e in log.events)
    assert log.stats.total == 15


def test_stats_recomputed_on_append():
    log = AnomalyEventLog()
    _record(log, 0, EventSeverity.LOW, EventStatus.INFO)
    _record(log, 1, EventSeverity.MEDIUM, EventStatus.ACTIVE)
    _record(log, 2, EventSeverity.LOW, EventStatus.AUTO_RESOLVED)
    _record(log, 3, EventSeverity.HIGH, EventStatus.INFO)

    stats = log.stats
    assert stats.total == 4
    assert stats.critical == 2
    assert stats.resolved == 1


def test_stats_follow_eviction():
    log = AnomalyEventLog(capacity=2)
    _record(log, 1, EventSeverity.MEDIUM, EventStatus.ACTIVE)
    _record(log, 2)
    assert log.stats.critical == 1

    _record(log, 3)
    assert log.stats.critical == 0
    assert log.stats.total == 2


def test_append_prebuilt_event_advances_ids():
    log = AnomalyEventLog()
    event = AnomalyEvent(
        event_id=10,
        tick=5,
        created_at=datetime(2025, 2, 7, 10, 0, tzinfo=timezone.utc),
        title="external",
        description="appended directly",
        severity=EventSeverity.HIGH,
        status=EventStatus.INFO,
    )
    log.append(event)
    following = _record(log, 6)

    assert following.event_id == 11
    assert compute_stats(log.events).critical == 1


def test_events_are_immutable():
    log = AnomalyEventLog()
    event = _record(log, 1)
    with pytest.raises(Exception):
        event.title = "changed"


def test_invalid_capacity():
    with pytest.raises(ValueError):
        AnomalyEventLog(capacity=0)
