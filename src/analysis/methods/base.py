"""
Base abstract interface for trainable analysis methods.

Every method trains from scratch on each call and exposes training as a
generator so that callers can pause between epochs:
- iter_fit(): Train on the series, yielding after every epoch
- get_config(): Report the active configuration
"""

import math
from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

import torch

from src.observations.models import TimeSeriesPoint

from ..exceptions import InsufficientDataError, TrainingFailure
from ..models import AnomalyRecord, ForecastPoint, Insight


@dataclass
class ForecastResult:
    """Output of a forecasting method"""

    forecasts: list[ForecastPoint]
    insights: list[Insight]


@dataclass
class DetectionResult:
    """Output of an anomaly detection method"""

    anomalies: list[AnomalyRecord]
    insights: list[Insight]
    threshold: float
    errors: list[float] = field(default_factory=list)


class AnalysisMethod(ABC):
    """Abstract base class for all analysis methods"""

    min_points: int = 3

    @abstractmethod
    def iter_fit(self, points: list[TimeSeriesPoint]) -> Iterator[int]:
        """Train a fresh model on the series

        Args:
            points: Aggregated periods, in the order produced by the aggregator

        Yields:
            The zero-based index of each completed epoch
        """

    @abstractmethod
    def get_config(self) -> dict[str, Any]:
        """Get the current configuration of this method"""

    @property
    @abstractmethod
    def name(self) -> str:
        """Name of the method"""

    @property
    @abstractmethod
    def epochs(self) -> int:
        """Number of training epochs per run"""

    def fit(self, points: list[TimeSeriesPoint]) -> None:
        """Run training to completion without pausing"""
        for _ in self.iter_fit(points):
            pass

    def validate_points(self, points: list[TimeSeriesPoint]) -> None:
        """Raise InsufficientDataError if the series is too short to train on"""
        if len(points) < self.min_points:
            raise InsufficientDataError(required=self.min_points, actual=len(points))

    def check_loss(self, loss: float, epoch: int) -> None:
        """Raise TrainingFailure if the loss stopped being a finite number"""
        if not math.isfinite(loss):
            raise TrainingFailure(self.name, f"non-finite loss {loss} at epoch {epoch}")

    def make_generator(self, seed: int | None) -> torch.Generator | None:
        """Seed weight initialisation and return a generator for shuffling

        Without a seed, initialisation and shuffling stay random across runs.
        """
        if seed is None:
            return None
        torch.manual_seed(seed)
        return torch.Generator().manual_seed(seed)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(config={self.get_config()})"
