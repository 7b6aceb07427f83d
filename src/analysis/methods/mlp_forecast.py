"""
Feed-forward regression forecast of period totals.

This method fits a small neural network mapping period index -> total
observations, then extrapolates it past the last observed period.

Workflow:
1. Training: min-max normalize index and totals, fit a 1-10-1 ReLU network
   on the full series (MSE, Adam) for a fixed number of epochs
2. Inference: evaluate the network at the next `horizon` indices, undo the
   normalization, round to whole counts and clamp negatives to 0
"""

import math
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

import numpy as np
import structlog
import torch
from torch import nn

from src.observations.models import TimeSeriesPoint
from src.observations.periods import next_period_keys

from ..exceptions import TrainingFailure
from ..insights import forecast_insights
from ..models import ForecastPoint
from ..normalizer import MinMaxNormalizer
from .base import AnalysisMethod, ForecastResult

logger = structlog.get_logger(__name__)


@dataclass
class MLPForecastConfig:
    """Configuration for the MLP forecaster"""

    horizon: int = 3
    epochs: int = 100
    learning_rate: float = 0.1
    hidden_units: int = 10
    seed: int | None = None


class MLPForecaster(AnalysisMethod):
    """Single hidden layer regressor over the period index"""

    def __init__(self, config: dict | None = None):
        """Initialize with configuration

        Args:
            config: Dictionary with keys matching MLPForecastConfig fields
        """
        self.config = MLPForecastConfig(**(config or {}))
        self._name = "mlp_forecast"

        self.model: nn.Module | None = None
        self.index_scaler: MinMaxNormalizer | None = None
        self.total_scaler: MinMaxNormalizer | None = None
        self.final_loss: float | None = None
        self._points: list[TimeSeriesPoint] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def epochs(self) -> int:
        return self.config.epochs

    def get_config(self) -> dict[str, Any]:
        return {
            "horizon": self.config.horizon,
            "epochs": self.config.epochs,
            "learning_rate": self.config.learning_rate,
            "hidden_units": self.config.hidden_units,
            "seed": self.config.seed,
        }

    def build_model(self) -> nn.Module:
        return nn.Sequential(
            nn.Linear(1, self.config.hidden_units),
            nn.ReLU(),
            nn.Linear(self.config.hidden_units, 1),
        )

    def iter_fit(self, points: list[TimeSeriesPoint]) -> Iterator[int]:
        self.validate_points(points)
        self.make_generator(self.config.seed)

        index = np.arange(len(points), dtype=np.float64).reshape(-1, 1)
        totals = np.array([p.total for p in points], dtype=np.float64).reshape(-1, 1)

        self.index_scaler = MinMaxNormalizer().fit(index)
        self.total_scaler = MinMaxNormalizer().fit(totals)

        xs = torch.tensor(self.index_scaler.transform(index), dtype=torch.float32)
        ys = torch.tensor(self.total_scaler.transform(totals), dtype=torch.float32)

        self.model = self.build_model()
        criterion = nn.MSELoss()
        optimizer = torch.optim.Adam(self.model.parameters(), lr=self.config.learning_rate)

        logger.debug("Fitting forecaster", n_points=len(points), epochs=self.config.epochs)

        self.model.train()
        for epoch in range(self.config.epochs):
            optimizer.zero_grad()
            loss = criterion(self.model(xs), ys)
            loss.backward()
            optimizer.step()

            self.final_loss = loss.item()
            self.check_loss(self.final_loss, epoch)
            yield epoch

        self._points = list(points)
        logger.info("Forecaster trained", n_points=len(points), final_loss=round(self.final_loss, 6))

    def forecast(self, horizon: int | None = None) -> list[ForecastPoint]:
        """Predict totals for the periods following the training series

        Args:
            horizon: Number of periods to forecast (defaults to the configured horizon)

        Returns:
            One ForecastPoint per future period, in calendar order

        Raises:
            ValueError: If horizon is less than 1
        """
        if self.model is None or not self._points:
            raise RuntimeError("Forecaster has not been trained")

        if horizon is None:
            horizon = self.config.horizon
        if horizon < 1:
            raise ValueError(f"horizon must be >= 1, got {horizon}")
        n = len(self._points)
        future = np.arange(n, n + horizon, dtype=np.float64).reshape(-1, 1)

        self.model.eval()
        with torch.no_grad():
            inputs = torch.tensor(self.index_scaler.transform(future), dtype=torch.float32)
            predicted = self.model(inputs).numpy().astype(np.float64)

        totals = self.total_scaler.inverse_transform(predicted).ravel()
        if not np.all(np.isfinite(totals)):
            raise TrainingFailure(self.name, "non-finite forecast values")

        keys = next_period_keys(self._points[-1].period_key, horizon)
        return [
            ForecastPoint(period_key=key, total=max(0, math.floor(value + 0.5)))
            for key, value in zip(keys, totals)
        ]

    def fit_and_forecast(self, points: list[TimeSeriesPoint], horizon: int | None = None) -> ForecastResult:
        """Train on the series and forecast the next periods"""
        self.fit(points)
        return self.result(horizon)

    def result(self, horizon: int | None = None) -> ForecastResult:
        """Forecasts and insights from the trained model"""
        forecasts = self.forecast(horizon)
        return ForecastResult(forecasts=forecasts, insights=forecast_insights(self._points, forecasts))
