"""
Core module: Configuration, logging, and exception handling.
"""

from .config import Config, EngineConfig, config
from .exceptions import (
    ConfigurationError,
    EngineStateError,
    VitalSyncError,
)
from .logging_config import setup_logging

__all__ = [
    "Config",
    "EngineConfig",
    "config",
    "setup_logging",
    "VitalSyncError",
    "ConfigurationError",
    "EngineStateError",
]
