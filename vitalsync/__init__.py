"""
VitalSync: synthetic vital-sign simulation with correlation, risk, and
anomaly analytics on a discrete tick.

    Engine.tick()
        ↓
    Anomaly state machine (vitalsync/anomaly)
        ↓
    Signal generation (vitalsync/signals)
        ↓
    Correlation matrix + risk scores (vitalsync/analytics)
        ↓
    Immutable EngineSnapshot for renderers
"""

from vitalsync.engine import AnomalySnapshot, EngineSnapshot, VitalSignEngine

__all__ = [
    "AnomalySnapshot",
    "EngineSnapshot",
    "VitalSignEngine",
]
