"""
Column-wise rescaling used before training.

Both transforms leave constant columns at 0 instead of dividing by zero.
"""

from dataclasses import dataclass

import numpy as np
import structlog

logger = structlog.get_logger(__name__)


@dataclass
class MinMaxNormalizer:
    """Min-max scaling to [0, 1] with an exact inverse

    Works on a vector (one column) or a 2-D matrix (one min/max per column).
    The fitted min_ / max_ must be kept to invert model outputs.
    """

    min_: np.ndarray | None = None
    max_: np.ndarray | None = None

    def fit(self, values) -> "MinMaxNormalizer":
        data = np.asarray(values, dtype=np.float64)
        if data.size == 0:
            raise ValueError("Cannot normalize an empty array")

        self.min_ = data.min(axis=0)
        self.max_ = data.max(axis=0)

        if np.any(self._degenerate()):
            logger.debug("Constant column in min-max normalization", min=self.min_.tolist())

        return self

    def transform(self, values) -> np.ndarray:
        self._check_fitted()
        data = np.asarray(values, dtype=np.float64)
        span = self.max_ - self.min_
        safe_span = np.where(self._degenerate(), 1.0, span)
        scaled = (data - self.min_) / safe_span
        return np.where(self._degenerate(), 0.0, scaled)

    def inverse_transform(self, values) -> np.ndarray:
        self._check_fitted()
        data = np.asarray(values, dtype=np.float64)
        restored = data * (self.max_ - self.min_) + self.min_
        return np.where(self._degenerate(), self.min_, restored)

    def fit_transform(self, values) -> np.ndarray:
        return self.fit(values).transform(values)

    def _degenerate(self) -> np.ndarray:
        return self.max_ == self.min_

    def _check_fitted(self) -> None:
        if self.min_ is None or self.max_ is None:
            raise ValueError("Normalizer has not been fitted")


def standardize(matrix) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Z-score each column of a 2-D matrix

    Uses the population standard deviation. Columns with zero deviation are
    mapped to 0.

    Returns:
        (standardized matrix, column means, column standard deviations)
    """
    data = np.asarray(matrix, dtype=np.float64)
    if data.ndim != 2 or data.shape[0] == 0:
        raise ValueError(f"Expected a non-empty 2-D matrix, got shape {data.shape}")

    mean = data.mean(axis=0)
    std = data.std(axis=0)

    constant = std == 0
    if np.any(constant):
        logger.debug("Constant feature column in standardization", columns=np.flatnonzero(constant).tolist())

    z = (data - mean) / np.where(constant, 1.0, std)
    z[:, constant] = 0.0

    return z, mean, std
