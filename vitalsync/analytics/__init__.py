"""
Analytics module: Rolling cross-correlation and composite risk scoring.
"""

from .correlation import (
    CorrelationBand,
    CorrelationEngine,
    CorrelationMatrix,
    correlation_band,
    pearson_correlation,
)
from .risk import (
    RiskCategory,
    RiskDirection,
    RiskEngine,
    RiskLevel,
    RiskSnapshot,
    factor_label,
    risk_direction,
    risk_level,
    round_half_up,
)

__all__ = [
    "CorrelationBand",
    "CorrelationEngine",
    "CorrelationMatrix",
    "correlation_band",
    "pearson_correlation",
    "RiskCategory",
    "RiskDirection",
    "RiskEngine",
    "RiskLevel",
    "RiskSnapshot",
    "factor_label",
    "risk_direction",
    "risk_level",
    "round_half_up",
]
