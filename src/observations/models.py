"""
Data models for aggregated survey observations.
"""

from dataclasses import dataclass
from enum import Enum


class ObservationType(Enum):
    """Outcome categories recorded by surveyors"""

    SEEN = "Seen"
    HEARD = "Heard"
    NOT_FOUND = "Not found"


@dataclass(frozen=True)
class TimeSeriesPoint:
    """Observation counts for one calendar period"""

    period_key: str  # "M-YYYY", e.g. "4-2024"
    seen: int = 0
    heard: int = 0
    not_found: int = 0

    def __post_init__(self):
        for name in ("seen", "heard", "not_found"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
            if value < 0:
                raise ValueError(f"{name} must be >= 0, got {value}")

    @property
    def total(self) -> int:
        return self.seen + self.heard + self.not_found

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization"""
        return {
            "period_key": self.period_key,
            "seen": self.seen,
            "heard": self.heard,
            "not_found": self.not_found,
            "total": self.total,
        }
