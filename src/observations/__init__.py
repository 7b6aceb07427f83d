"""
Survey observation records and their monthly aggregation.
"""

from .aggregator import count_by_month_year, parse_observation_date, summarize
from .models import ObservationType, TimeSeriesPoint
from .periods import format_period, next_period_keys, parse_period_key

__all__ = [
    "ObservationType",
    "TimeSeriesPoint",
    "count_by_month_year",
    "format_period",
    "next_period_keys",
    "parse_observation_date",
    "parse_period_key",
    "summarize",
]
