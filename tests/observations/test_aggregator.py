"""
Tests for monthly aggregation of raw survey records.
"""

from datetime import datetime

import pandas as pd
import pytest

from src.observations.aggregator import count_by_month_year, parse_observation_date, summarize
from src.observations.models import TimeSeriesPoint


class TestParseObservationDate:
    """Tests for parse_observation_date."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("2024-03-15", datetime(2024, 3, 15)),
            ("2024-3-5", datetime(2024, 3, 5)),
            ("15/03/2024", datetime(2024, 3, 15)),
            ("15-Mar-24", datetime(2024, 3, 15)),
            ("15-mar-2024", datetime(2024, 3, 15)),
            (45366, datetime(2024, 3, 15)),
        ],
    )
    def test_supported_formats(self, value, expected):
        """Test every date format found in survey spreadsheets."""
        assert parse_observation_date(value) == expected

    def test_datetime_passthrough(self):
        """Test that datetimes are returned as-is."""
        value = datetime(2024, 1, 2)

        assert parse_observation_date(value) == value

    @pytest.mark.parametrize("value", [None, "", "not a date", "31/02/2024", "15-Foo-24", True, float("nan")])
    def test_unparseable_values(self, value):
        """Test that invalid dates are skipped rather than raising."""
        assert parse_observation_date(value) is None


class TestCountByMonthYear:
    """Tests for count_by_month_year."""

    def test_counts_each_outcome(self):
        """Test that outcomes are counted per month."""
        records = [
            {"Date": "2024-01-03", "Seen/Heard": "Seen"},
            {"Date": "2024-01-10", "Seen/Heard": "Seen"},
            {"Date": "2024-01-21", "Seen/Heard": "Heard"},
            {"Date": "2024-02-01", "Seen/Heard": "Not found"},
        ]

        points = count_by_month_year(records)

        assert points == [
            TimeSeriesPoint(period_key="1-2024", seen=2, heard=1, not_found=0),
            TimeSeriesPoint(period_key="2-2024", seen=0, heard=0, not_found=1),
        ]

    def test_fills_missing_months(self):
        """Test that gaps between the first and last month are zero filled."""
        records = [
            {"Date": "2024-11-03", "Seen/Heard": "Seen"},
            {"Date": "2025-02-10", "Seen/Heard": "Heard"},
        ]

        points = count_by_month_year(records)

        assert [p.period_key for p in points] == ["11-2024", "12-2024", "1-2025", "2-2025"]
        assert points[1].total == 0
        assert points[2].total == 0

    def test_sorted_chronologically(self):
        """Test that input order does not matter."""
        records = [
            {"Date": "2024-03-01", "Seen/Heard": "Seen"},
            {"Date": "2024-01-01", "Seen/Heard": "Seen"},
        ]

        points = count_by_month_year(records)

        assert [p.period_key for p in points] == ["1-2024", "2-2024", "3-2024"]

    def test_skips_invalid_records(self):
        """Test that bad dates and unknown outcomes are ignored."""
        records = [
            {"Date": "garbage", "Seen/Heard": "Seen"},
            {"Date": "2024-01-01", "Seen/Heard": "Smelled"},
            {"Seen/Heard": "Seen"},
            {"Date": "2024-01-01", "Seen/Heard": "Heard"},
        ]

        points = count_by_month_year(records)

        assert points == [TimeSeriesPoint(period_key="1-2024", heard=1)]

    def test_empty_input(self):
        """Test that no valid records produce no points."""
        assert count_by_month_year([]) == []

    def test_accepts_dataframe(self):
        """Test aggregation straight from a pandas DataFrame."""
        frame = pd.DataFrame(
            {
                "Date": ["2024-05-01", "02/05/2024", "20-May-24"],
                "Seen/Heard": ["Seen", "Heard", "Not found"],
            }
        )

        points = count_by_month_year(frame)

        assert points == [TimeSeriesPoint(period_key="5-2024", seen=1, heard=1, not_found=1)]


class TestSummarize:
    """Tests for summary statistics."""

    def test_totals_and_shares(self):
        points = [
            TimeSeriesPoint(period_key="1-2024", seen=3, heard=1, not_found=0),
            TimeSeriesPoint(period_key="2-2024", seen=3, heard=2, not_found=1),
        ]

        summary = summarize(points)

        assert summary["periods"] == 2
        assert summary["total"] == 10
        assert summary["seen"] == 6
        assert summary["seen_percent"] == 60
        assert summary["heard_percent"] == 30
        assert summary["not_found_percent"] == 10

    def test_no_observations(self):
        """Test that empty input does not divide by zero."""
        summary = summarize([])

        assert summary["total"] == 0
        assert summary["seen_percent"] == 0
