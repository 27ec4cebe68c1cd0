"""
Application configuration for the VitalSync simulation engine.

Provides environment-aware settings with physiologically plausible defaults.
Every model constant (noise scales, capacities, schedule bounds, risk weights)
is a config field so callers can override it instead of editing engine code.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SignalConfig(BaseModel):
    """
    Static parameters of one simulated vital sign.

    Notes:
    - baseline must be strictly positive; risk deviations divide by it.
    - variance is the noise scale of the generator, not a statistical variance.
    """

    label: str
    baseline: float = Field(gt=0.0, description="Resting value the signal reverts toward")
    min: float
    max: float
    variance: float = Field(ge=0.0, description="Noise scale per tick")
    unit: str = ""

    @model_validator(mode="after")
    def _check_bounds(self) -> "SignalConfig":
        if self.min > self.max:
            raise ValueError(f"min ({self.min}) must not exceed max ({self.max})")
        if not self.min <= self.baseline <= self.max:
            raise ValueError(
                f"baseline ({self.baseline}) must lie within [{self.min}, {self.max}]"
            )
        return self


class DriftConfig(BaseModel):
    """
    Anomaly drift descriptor for one signal.

    Applied as: direction * (severity * magnitude + noise * noise_scale).
    When rectified is True the drift noise is |gaussian| so it always pushes
    in the drift direction.
    """

    direction: Literal[-1, 1] = 1
    magnitude: float = Field(ge=0.0)
    noise_scale: float = Field(0.0, ge=0.0)
    rectified: bool = False


class AnomalyScheduleConfig(BaseModel):
    """
    Scheduling bounds for synthetic anomaly episodes.

    Notes:
    - An episode resolves on the first tick where elapsed > episode_ticks.
    - Next trigger = resolve tick + retrigger_offset + uniform_int(0, retrigger_jitter - 1).
    - ramp_ticks: ticks until drift reaches full severity.
    """

    first_trigger_tick: int = Field(30, ge=0)
    retrigger_offset: int = Field(25, ge=0)
    retrigger_jitter: int = Field(20, ge=1)
    episode_ticks: int = Field(20, ge=0)
    ramp_ticks: int = Field(15, ge=1)


class RiskTermConfig(BaseModel):
    """
    One weighted input of a risk category.

    kind="deviation" reads |value - baseline| / baseline of signals[0];
    kind="correlation" reads |corr(signals[0], signals[1])|.
    """

    kind: Literal["deviation", "correlation"]
    signals: Tuple[str, ...]
    weight: float = Field(ge=0.0)

    @model_validator(mode="after")
    def _check_arity(self) -> "RiskTermConfig":
        expected = 1 if self.kind == "deviation" else 2
        if len(self.signals) != expected:
            raise ValueError(f"{self.kind} term needs {expected} signal(s), got {len(self.signals)}")
        return self


class FactorRuleConfig(BaseModel):
    """
    Threshold rule producing a qualitative factor label.

    Bands are checked in order: the first band whose bound is above the input
    (or at/above it when inclusive) supplies the label, otherwise `otherwise`.
    """

    title: str
    term: RiskTermConfig
    bands: List[Tuple[float, str]]
    otherwise: str
    inclusive: bool = False


class RiskCategoryConfig(BaseModel):
    """
    Weighted-sum definition of one composite risk category.

    target = clamp(sum(weight * input) * scale, floor, ceiling)
    """

    terms: List[RiskTermConfig]
    scale: float = Field(100.0, gt=0.0)
    floor: float = Field(ge=0.0, le=100.0)
    ceiling: float = Field(95.0, ge=0.0, le=100.0)
    initial_value: float = Field(ge=0.0, le=100.0)
    factors: List[FactorRuleConfig] = Field(default_factory=list)


def _deviation(signal: str, weight: float = 0.0) -> RiskTermConfig:
    return RiskTermConfig(kind="deviation", signals=(signal,), weight=weight)


def _correlation(a: str, b: str, weight: float = 0.0) -> RiskTermConfig:
    return RiskTermConfig(kind="correlation", signals=(a, b), weight=weight)


def _default_signals() -> Dict[str, SignalConfig]:
    return {
        "hr": SignalConfig(label="HR", baseline=72, min=55, max=105, variance=3, unit="BPM"),
        "spo2": SignalConfig(label="SpO2", baseline=98, min=92, max=100, variance=0.5, unit="%"),
        "bp_sys": SignalConfig(label="Sys BP", baseline=120, min=95, max=150, variance=4, unit="mmHg"),
        "bp_dia": SignalConfig(label="Dia BP", baseline=80, min=60, max=100, variance=3, unit="mmHg"),
        "temp": SignalConfig(label="Temp", baseline=98.6, min=96.5, max=101, variance=0.2, unit="°F"),
        "rr": SignalConfig(label="RR", baseline=16, min=10, max=25, variance=1.5, unit="br/min"),
        "hrv": SignalConfig(label="HRV", baseline=42, min=15, max=80, variance=4, unit="ms"),
    }


def _default_drift() -> Dict[str, DriftConfig]:
    return {
        "hr": DriftConfig(direction=1, magnitude=8, noise_scale=2),
        "spo2": DriftConfig(direction=-1, magnitude=2.5, noise_scale=0.5, rectified=True),
        "rr": DriftConfig(direction=1, magnitude=4, noise_scale=1),
        "hrv": DriftConfig(direction=-1, magnitude=10, noise_scale=2, rectified=True),
        "bp_sys": DriftConfig(direction=1, magnitude=6, noise_scale=2),
        "temp": DriftConfig(direction=1, magnitude=0.6, noise_scale=0.1),
    }


def _default_risks() -> Dict[str, RiskCategoryConfig]:
    return {
        "cardio": RiskCategoryConfig(
            terms=[
                _deviation("hr", 30),
                _deviation("bp_sys", 25),
                _deviation("hrv", 25),
                _correlation("hr", "bp_sys", 20),
            ],
            floor=3,
            initial_value=12,
            factors=[
                FactorRuleConfig(
                    title="HR-BP Sync",
                    term=_correlation("hr", "bp_sys"),
                    bands=[(0.5, "Normal")],
                    otherwise="Elevated",
                    inclusive=True,
                ),
                FactorRuleConfig(
                    title="HRV Stability",
                    term=_deviation("hrv"),
                    bands=[(0.15, "Good"), (0.3, "Fair")],
                    otherwise="Poor",
                ),
            ],
        ),
        "respiratory": RiskCategoryConfig(
            terms=[
                _deviation("spo2", 35),
                _deviation("rr", 30),
                _deviation("hr", 15),
                _correlation("spo2", "rr", 20),
            ],
            floor=2,
            initial_value=8,
            factors=[
                FactorRuleConfig(
                    title="SpO2-RR Sync",
                    term=_correlation("spo2", "rr"),
                    bands=[(0.5, "Normal")],
                    otherwise="Diverging",
                    inclusive=True,
                ),
                FactorRuleConfig(
                    title="Breathing Pattern",
                    term=_deviation("rr"),
                    bands=[(0.15, "Regular")],
                    otherwise="Irregular",
                ),
            ],
        ),
        "metabolic": RiskCategoryConfig(
            terms=[
                _deviation("temp", 30),
                _deviation("hr", 25),
                _deviation("bp_sys", 20),
                _correlation("temp", "hr", 25),
            ],
            floor=3,
            initial_value=15,
            factors=[
                FactorRuleConfig(
                    title="Temp-HR Pattern",
                    term=_correlation("temp", "hr"),
                    bands=[(0.5, "Normal")],
                    otherwise="Coupling",
                    inclusive=True,
                ),
                FactorRuleConfig(
                    title="Circadian Rhythm",
                    term=_deviation("temp"),
                    bands=[(0.005, "Aligned")],
                    otherwise="Shifted",
                ),
            ],
        ),
        "apnea": RiskCategoryConfig(
            terms=[
                _deviation("spo2", 35),
                _deviation("rr", 25),
                _deviation("hrv", 20),
                _correlation("spo2", "hrv", 20),
            ],
            floor=1,
            initial_value=6,
            factors=[
                FactorRuleConfig(
                    title="Night SpO2 Dips",
                    term=_deviation("spo2"),
                    bands=[(0.02, "None")],
                    otherwise="Detected",
                    inclusive=True,
                ),
                FactorRuleConfig(
                    title="RR Irregularity",
                    term=_deviation("rr"),
                    bands=[(0.1, "Low")],
                    otherwise="Moderate",
                ),
            ],
        ),
    }


class EngineConfig(BaseModel):
    """
    Simulation engine configuration.

    Notes:
    - tick_interval_ms is informational; the engine never reads a clock.
    - chart_capacity / trend_capacity bound the rolling history and trend series.
    - min_correlation_samples: overlap below this yields a coefficient of 0.
    - smoothing: fraction of the gap to target closed by a risk value per tick.
    """

    signals: Dict[str, SignalConfig] = Field(default_factory=_default_signals)
    correlation_signals: List[str] = Field(
        default_factory=lambda: ["hr", "spo2", "bp_sys", "temp", "rr", "hrv"]
    )
    trend_signals: List[str] = Field(
        default_factory=lambda: ["hr", "spo2", "bp_sys", "bp_dia", "rr", "hrv"]
    )

    tick_interval_ms: int = Field(2000, ge=1)
    chart_capacity: int = Field(40, ge=1)
    trend_capacity: int = Field(60, ge=1)
    history_seed_samples: int = Field(15, ge=0)
    trend_seed_samples: int = Field(20, ge=0)
    seed_noise_factor: float = Field(0.5, ge=0.0)

    circadian_frequency: float = Field(0.02, ge=0.0)
    circadian_amplitude: float = Field(0.5, ge=0.0)
    circadian_weight: float = Field(0.1, ge=0.0)
    reversion_rate: float = Field(0.08, ge=0.0, le=1.0)
    decimals: int = Field(1, ge=0)

    status_watch: float = Field(0.18, ge=0.0, description="Range fraction flagged as Watch")
    status_alert: float = Field(0.35, ge=0.0, description="Range fraction flagged as Alert")
    trend_window: int = Field(5, ge=1)
    trend_stable_pct: float = Field(1.0, ge=0.0)

    min_correlation_samples: int = Field(5, ge=2)

    anomaly: AnomalyScheduleConfig = AnomalyScheduleConfig()
    drift: Dict[str, DriftConfig] = Field(default_factory=_default_drift)

    risks: Dict[str, RiskCategoryConfig] = Field(default_factory=_default_risks)
    smoothing: float = Field(0.1, gt=0.0, le=1.0)

    event_log_capacity: int = Field(15, ge=1)


class Config(BaseSettings):
    """
    Global configuration with environment overrides.
    """

    model_config = SettingsConfigDict(
        env_prefix="VITALSYNC_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    log_level: str = Field("INFO", description="Default logging level")
    logs_dir: Path = Field(Path("logs"), description="Directory for log files")
    random_seed: Optional[int] = Field(None, description="Seed for the default random source")
    engine: EngineConfig = EngineConfig()

    def model_post_init(self, __context: object) -> None:
        self.logs_dir.mkdir(parents=True, exist_ok=True)


config = Config()
