"""
Survey Observation Analysis

Forecasts monthly observation totals and flags anomalous months in a wildlife
survey series.

Architecture:
- Forecaster: small neural regressor over the period index (MLP)
- Anomaly Detector: autoencoder over the monthly Seen/Heard/Not-found mix
- Coordinator: runs both trainings, publishes progress, combines insights

Usage:
    # Analyse a spreadsheet of raw observations
    python -m src.analysis.report observations.csv
"""

from .coordinator import TrainingCoordinator, analyze
from .exceptions import AnalysisError, InsufficientDataError, StaleRunError, TrainingFailure
from .models import (
    AnalysisConfig,
    AnalysisResult,
    AnomalyRecord,
    ForecastPoint,
    Insight,
    InsightCategory,
    TrainingProgress,
    TrainingState,
)

__all__ = [
    "AnalysisConfig",
    "AnalysisError",
    "AnalysisResult",
    "AnomalyRecord",
    "ForecastPoint",
    "Insight",
    "InsightCategory",
    "InsufficientDataError",
    "StaleRunError",
    "TrainingCoordinator",
    "TrainingFailure",
    "TrainingProgress",
    "TrainingState",
    "analyze",
]
