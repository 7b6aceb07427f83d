"""
Pytest configuration and shared fixtures.
"""

import pytest

from src.analysis.models import AnalysisConfig
from src.observations.models import TimeSeriesPoint


def make_series(totals: list[int], start_month: int = 1, start_year: int = 2024) -> list[TimeSeriesPoint]:
    """Monthly points whose totals split roughly 60/30/10 across outcomes"""
    points = []
    month, year = start_month, start_year
    for total in totals:
        seen = int(total * 0.6)
        heard = int(total * 0.3)
        points.append(
            TimeSeriesPoint(
                period_key=f"{month}-{year}",
                seen=seen,
                heard=heard,
                not_found=total - seen - heard,
            )
        )
        month += 1
        if month > 12:
            month, year = 1, year + 1
    return points


# Series fixtures
@pytest.fixture
def series_factory():
    """Build a monthly series from a list of totals."""
    return make_series


@pytest.fixture
def spike_series():
    """Six months with a single spike in the fourth month."""
    return make_series([10, 12, 11, 40, 13, 14])


@pytest.fixture
def uniform_spike_series():
    """The spike series with every observation Seen, so only totals vary."""
    return [
        TimeSeriesPoint(period_key=point.period_key, seen=point.total)
        for point in make_series([10, 12, 11, 40, 13, 14])
    ]


@pytest.fixture
def constant_series():
    """Five identical months."""
    return make_series([20, 20, 20, 20, 20])


@pytest.fixture
def growing_series():
    """Steady linear growth."""
    return make_series([10, 20, 30, 40, 50])


@pytest.fixture
def short_series():
    """Too few periods to train on."""
    return make_series([5, 8])


# Config fixtures
@pytest.fixture
def seeded_config():
    """Default hyperparameters with a fixed seed."""
    return AnalysisConfig(seed=7)


@pytest.fixture
def fast_config():
    """Short training for tests that only check the pipeline mechanics."""
    return AnalysisConfig(forecaster_epochs=20, anomaly_epochs=20, seed=1)
