"""
Anomaly module: Synthetic episode scheduling and the bounded event log.
"""

from .event_log import AnomalyEventLog, compute_stats
from .schema import AnomalyEvent, AnomalyState, AnomalyStats, EventSeverity, EventStatus
from .state_machine import AnomalyStateMachine

__all__ = [
    "AnomalyEventLog",
    "AnomalyStateMachine",
    "AnomalyEvent",
    "AnomalyState",
    "AnomalyStats",
    "EventSeverity",
    "EventStatus",
    "compute_stats",
]
