"""
Configuration and result models for the forecasting and anomaly analysis.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from src.observations.models import TimeSeriesPoint


@dataclass
class AnalysisConfig:
    """Configuration for a training run"""

    forecast_method: str = "mlp_forecast"
    anomaly_method: str = "autoencoder"

    # Forecaster
    horizon: int = 3  # periods to forecast
    forecaster_epochs: int = 100
    forecaster_learning_rate: float = 0.1
    forecaster_hidden_units: int = 10

    # Anomaly detector
    anomaly_epochs: int = 50
    anomaly_batch_size: int = 4
    anomaly_sigma_threshold: float = 2.0
    anomaly_latent_units: int = 2
    anomaly_learning_rate: float = 0.001

    min_periods: int = 3
    checkpoint_every: int = 10  # epochs between progress events
    seed: int | None = None  # None keeps weight initialisation random

    def __post_init__(self):
        positive = {
            "horizon": self.horizon,
            "forecaster_epochs": self.forecaster_epochs,
            "forecaster_hidden_units": self.forecaster_hidden_units,
            "anomaly_epochs": self.anomaly_epochs,
            "anomaly_batch_size": self.anomaly_batch_size,
            "anomaly_latent_units": self.anomaly_latent_units,
            "checkpoint_every": self.checkpoint_every,
        }
        for name, value in positive.items():
            if value < 1:
                raise ValueError(f"{name} must be >= 1, got {value}")

        if self.forecaster_learning_rate <= 0 or self.anomaly_learning_rate <= 0:
            raise ValueError("Learning rates must be > 0")
        if self.anomaly_sigma_threshold < 0:
            raise ValueError(
                f"anomaly_sigma_threshold must be >= 0, got {self.anomaly_sigma_threshold}"
            )
        if self.min_periods < 3:
            raise ValueError(f"min_periods must be >= 3, got {self.min_periods}")

    def forecast_config(self) -> dict[str, Any]:
        """Keyword configuration for the forecasting method"""
        return {
            "horizon": self.horizon,
            "epochs": self.forecaster_epochs,
            "learning_rate": self.forecaster_learning_rate,
            "hidden_units": self.forecaster_hidden_units,
            "seed": self.seed,
        }

    def anomaly_config(self) -> dict[str, Any]:
        """Keyword configuration for the anomaly detection method"""
        return {
            "epochs": self.anomaly_epochs,
            "batch_size": self.anomaly_batch_size,
            "sigma_threshold": self.anomaly_sigma_threshold,
            "latent_units": self.anomaly_latent_units,
            "learning_rate": self.anomaly_learning_rate,
            "seed": self.seed,
        }


class InsightCategory(Enum):
    """What an insight talks about"""

    TREND = "trend"
    FORECAST = "forecast"
    ANOMALY_COUNT = "anomaly_count"
    ANOMALY_DETAIL = "anomaly_detail"
    STATUS = "status"  # insufficient data, training failures


@dataclass(frozen=True)
class Insight:
    """A templated sentence tagged with its category"""

    category: InsightCategory
    text: str

    def __str__(self) -> str:
        return self.text

    def to_dict(self) -> dict:
        return {"category": self.category.value, "text": self.text}


@dataclass(frozen=True)
class ForecastPoint:
    """Predicted total for a future period"""

    period_key: str
    total: int
    is_forecast: bool = True

    def to_dict(self) -> dict:
        return {"period_key": self.period_key, "total": self.total, "is_forecast": self.is_forecast}


@dataclass(frozen=True)
class AnomalyRecord:
    """A historical period flagged by the anomaly detector"""

    index: int
    period_key: str
    score: float  # reconstruction error
    source: TimeSeriesPoint

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "period_key": self.period_key,
            "score": self.score,
            "source": self.source.to_dict(),
        }


class TrainingState(Enum):
    """Lifecycle of a training run"""

    IDLE = "idle"
    VALIDATING = "validating"
    TRAINING_FORECASTER = "training_forecaster"
    TRAINING_ANOMALY_DETECTOR = "training_anomaly_detector"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass(frozen=True)
class TrainingProgress:
    """Progress event emitted while a run advances"""

    percent: int
    state: TrainingState
    generation: int


@dataclass
class AnalysisResult:
    """Combined output of one run"""

    forecasts: list[ForecastPoint] = field(default_factory=list)
    anomalies: list[AnomalyRecord] = field(default_factory=list)
    insights: list[Insight] = field(default_factory=list)

    def insights_for(self, *categories: InsightCategory) -> list[Insight]:
        """Insights belonging to any of the given categories, in order"""
        return [insight for insight in self.insights if insight.category in categories]

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization"""
        return {
            "forecasts": [f.to_dict() for f in self.forecasts],
            "anomalies": [a.to_dict() for a in self.anomalies],
            "insights": [i.to_dict() for i in self.insights],
        }
