"""
Tests for analysis models (AnalysisConfig, Insight, AnalysisResult).
"""

import json

import pytest

from src.analysis.models import (
    AnalysisConfig,
    AnalysisResult,
    AnomalyRecord,
    ForecastPoint,
    Insight,
    InsightCategory,
    TrainingState,
)
from src.observations.models import TimeSeriesPoint


class TestAnalysisConfig:
    """Tests for AnalysisConfig dataclass."""

    def test_default_config(self):
        """Test default hyperparameters."""
        config = AnalysisConfig()

        assert config.horizon == 3
        assert config.forecaster_epochs == 100
        assert config.forecaster_hidden_units == 10
        assert config.anomaly_epochs == 50
        assert config.anomaly_batch_size == 4
        assert config.anomaly_sigma_threshold == 2.0
        assert config.anomaly_latent_units == 2
        assert config.min_periods == 3
        assert config.seed is None

    def test_custom_config(self):
        """Test configuration with custom values."""
        config = AnalysisConfig(horizon=6, anomaly_sigma_threshold=2.5, seed=42)

        assert config.horizon == 6
        assert config.anomaly_sigma_threshold == 2.5
        assert config.seed == 42

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"horizon": 0},
            {"forecaster_epochs": 0},
            {"anomaly_batch_size": 0},
            {"checkpoint_every": 0},
            {"forecaster_learning_rate": 0},
            {"anomaly_sigma_threshold": -1.0},
            {"min_periods": 2},
        ],
    )
    def test_invalid_values_rejected(self, kwargs):
        """Test that nonsensical hyperparameters fail fast."""
        with pytest.raises(ValueError):
            AnalysisConfig(**kwargs)

    def test_method_configs(self):
        """Test that per-method configuration is derived from the run config."""
        config = AnalysisConfig(horizon=4, anomaly_batch_size=8, seed=3)

        assert config.forecast_config()["horizon"] == 4
        assert config.forecast_config()["seed"] == 3
        assert config.anomaly_config()["batch_size"] == 8
        assert config.anomaly_config()["sigma_threshold"] == 2.0


class TestInsight:
    """Tests for Insight."""

    def test_str_is_text(self):
        """Test that insights print as their sentence."""
        insight = Insight(InsightCategory.TREND, "ML Analysis: stable")

        assert str(insight) == "ML Analysis: stable"

    def test_to_dict(self):
        insight = Insight(InsightCategory.ANOMALY_COUNT, "text")

        assert insight.to_dict() == {"category": "anomaly_count", "text": "text"}


class TestAnalysisResult:
    """Tests for AnalysisResult."""

    def test_defaults_empty(self):
        result = AnalysisResult()

        assert result.forecasts == []
        assert result.anomalies == []
        assert result.insights == []

    def test_insights_for_filters_by_category(self):
        """Test category filtering keeps the original order."""
        insights = [
            Insight(InsightCategory.TREND, "a"),
            Insight(InsightCategory.ANOMALY_COUNT, "b"),
            Insight(InsightCategory.FORECAST, "c"),
        ]
        result = AnalysisResult(insights=insights)

        assert result.insights_for(InsightCategory.TREND, InsightCategory.FORECAST) == [insights[0], insights[2]]
        assert result.insights_for(InsightCategory.STATUS) == []

    def test_to_dict_is_json_serializable(self):
        """Test that the full result can be dumped to JSON."""
        point = TimeSeriesPoint(period_key="4-2024", seen=30, heard=5, not_found=5)
        result = AnalysisResult(
            forecasts=[ForecastPoint(period_key="5-2024", total=12)],
            anomalies=[AnomalyRecord(index=3, period_key="4-2024", score=1.25, source=point)],
            insights=[Insight(InsightCategory.ANOMALY_COUNT, "text")],
        )

        data = json.loads(json.dumps(result.to_dict()))

        assert data["forecasts"] == [{"period_key": "5-2024", "total": 12, "is_forecast": True}]
        assert data["anomalies"][0]["source"]["total"] == 40
        assert data["insights"][0]["category"] == "anomaly_count"


class TestTrainingState:
    """Tests for TrainingState enum."""

    def test_all_states_exist(self):
        expected = {
            "idle",
            "validating",
            "training_forecaster",
            "training_anomaly_detector",
            "completed",
            "error",
        }

        assert {state.value for state in TrainingState} == expected
