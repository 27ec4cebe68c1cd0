"""
Custom exceptions for the VitalSync simulation engine.

Numeric edge cases (short histories, flat series, out-of-range samples) are
handled by policy inside the engine and never raise. These exceptions cover
wiring and lifecycle mistakes made by the caller.
"""


class VitalSyncError(Exception):
    """Base exception for simulation engine failures."""
    pass


class ConfigurationError(VitalSyncError):
    """Raised when configuration is inconsistent (e.g., unknown signal names)."""
    pass


class EngineStateError(VitalSyncError):
    """Raised when the engine is used out of order (e.g., tick before initialize)."""
    pass

