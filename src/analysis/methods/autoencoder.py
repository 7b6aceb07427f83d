"""
Autoencoder anomaly detection over per-period observation mix.

Each period is described by [total, seen share, heard share, not-found share].
An autoencoder squeezes the standardized features through a small latent
layer; periods it reconstructs badly are unusual relative to the rest of the
series.

Workflow:
1. Training: z-score the feature columns, fit encoder (ReLU) + decoder
   (sigmoid) on mini-batches shuffled every epoch
2. Scoring: per-period mean squared reconstruction error
3. Flagging: error > mean(errors) + sigma * std(errors)
"""

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

import numpy as np
import structlog
import torch
from torch import nn
from torch.utils.data import DataLoader, TensorDataset

from src.observations.models import TimeSeriesPoint

from ..exceptions import TrainingFailure
from ..insights import anomaly_insights
from ..models import AnomalyRecord
from ..normalizer import standardize
from .base import AnalysisMethod, DetectionResult

logger = structlog.get_logger(__name__)

N_FEATURES = 4


@dataclass
class AutoencoderConfig:
    """Configuration for the autoencoder detector"""

    epochs: int = 50
    batch_size: int = 4
    sigma_threshold: float = 2.0  # standard deviations above the mean error
    latent_units: int = 2
    learning_rate: float = 0.001
    seed: int | None = None


def extract_features(points: list[TimeSeriesPoint]) -> np.ndarray:
    """Feature matrix of [total, seen/total, heard/total, not_found/total]

    Ratios are 0 for periods without any observation.
    """
    rows = []
    for point in points:
        total = point.total
        if total == 0:
            rows.append([0.0, 0.0, 0.0, 0.0])
        else:
            rows.append([total, point.seen / total, point.heard / total, point.not_found / total])
    return np.array(rows, dtype=np.float64).reshape(-1, N_FEATURES)


def anomaly_threshold(errors, sigma: float = 2.0) -> float:
    """mean(errors) + sigma * std(errors), with the population std"""
    errors = np.asarray(errors, dtype=np.float64)
    return float(errors.mean() + sigma * errors.std())


def flag_anomalies(errors, threshold: float) -> list[int]:
    """Indices whose error is strictly above the threshold"""
    return [int(i) for i in np.flatnonzero(np.asarray(errors, dtype=np.float64) > threshold)]


class AutoencoderDetector(AnalysisMethod):
    """Reconstruction-error anomaly detector"""

    def __init__(self, config: dict | None = None):
        """Initialize with configuration

        Args:
            config: Dictionary with keys matching AutoencoderConfig fields
        """
        self.config = AutoencoderConfig(**(config or {}))
        self._name = "autoencoder"

        self.encoder: nn.Module | None = None
        self.decoder: nn.Module | None = None
        self.model: nn.Module | None = None
        self.final_loss: float | None = None
        self._inputs: torch.Tensor | None = None
        self._points: list[TimeSeriesPoint] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def epochs(self) -> int:
        return self.config.epochs

    def get_config(self) -> dict[str, Any]:
        return {
            "epochs": self.config.epochs,
            "batch_size": self.config.batch_size,
            "sigma_threshold": self.config.sigma_threshold,
            "latent_units": self.config.latent_units,
            "learning_rate": self.config.learning_rate,
            "seed": self.config.seed,
        }

    def build_model(self) -> nn.Module:
        self.encoder = nn.Sequential(nn.Linear(N_FEATURES, self.config.latent_units), nn.ReLU())
        self.decoder = nn.Sequential(nn.Linear(self.config.latent_units, N_FEATURES), nn.Sigmoid())
        return nn.Sequential(self.encoder, self.decoder)

    def iter_fit(self, points: list[TimeSeriesPoint]) -> Iterator[int]:
        self.validate_points(points)
        generator = self.make_generator(self.config.seed)

        standardized, _, _ = standardize(extract_features(points))
        inputs = torch.tensor(standardized, dtype=torch.float32)

        loader = DataLoader(
            TensorDataset(inputs, inputs),
            batch_size=self.config.batch_size,
            shuffle=True,
            generator=generator,
        )

        self.model = self.build_model()
        criterion = nn.MSELoss()
        optimizer = torch.optim.Adam(self.model.parameters(), lr=self.config.learning_rate)

        logger.debug(
            "Fitting autoencoder",
            n_points=len(points),
            epochs=self.config.epochs,
            batch_size=self.config.batch_size,
        )

        self.model.train()
        for epoch in range(self.config.epochs):
            epoch_loss = 0.0
            for xb, yb in loader:
                optimizer.zero_grad()
                loss = criterion(self.model(xb), yb)
                loss.backward()
                optimizer.step()
                epoch_loss += loss.item() * len(xb)

            self.final_loss = epoch_loss / len(inputs)
            self.check_loss(self.final_loss, epoch)
            yield epoch

        self._inputs = inputs
        self._points = list(points)
        logger.info("Autoencoder trained", n_points=len(points), final_loss=round(self.final_loss, 6))

    def reconstruction_errors(self) -> np.ndarray:
        """Per-period mean squared reconstruction error of the training series"""
        if self.model is None or self._inputs is None:
            raise RuntimeError("Autoencoder has not been trained")

        self.model.eval()
        with torch.no_grad():
            reconstructed = self.model(self._inputs)
            errors = ((reconstructed - self._inputs) ** 2).mean(dim=1)

        errors = errors.numpy().astype(np.float64)
        if not np.all(np.isfinite(errors)):
            raise TrainingFailure(self.name, "non-finite reconstruction errors")
        return errors

    def detect(self) -> DetectionResult:
        """Score the training series and flag the outlying periods"""
        errors = self.reconstruction_errors()
        threshold = anomaly_threshold(errors, self.config.sigma_threshold)

        anomalies = [
            AnomalyRecord(
                index=i,
                period_key=self._points[i].period_key,
                score=float(errors[i]),
                source=self._points[i],
            )
            for i in flag_anomalies(errors, threshold)
        ]
        anomalies.sort(key=lambda anomaly: anomaly.score, reverse=True)

        logger.info(
            "Anomaly detection completed",
            n_points=len(errors),
            anomalies=len(anomalies),
            threshold=round(threshold, 6),
            mean_error=round(float(errors.mean()), 6),
        )

        return DetectionResult(
            anomalies=anomalies,
            insights=anomaly_insights(anomalies),
            threshold=threshold,
            errors=errors.tolist(),
        )

    def fit_and_detect(self, points: list[TimeSeriesPoint]) -> DetectionResult:
        """Train on the series and report its anomalous periods"""
        self.fit(points)
        return self.detect()
