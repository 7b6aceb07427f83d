"""
Aggregation of raw survey records into monthly observation counts.

Each raw record carries a ``Date`` and a ``Seen/Heard`` outcome. Records are
bucketed by calendar month, gaps between the first and last month are filled
with zero counts, and one TimeSeriesPoint is produced per month in
chronological order.
"""

import math
import numbers
import re
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

import pandas as pd
import structlog

from .models import ObservationType, TimeSeriesPoint
from .periods import make_period_key

logger = structlog.get_logger(__name__)

DATE_COLUMN = "Date"
OUTCOME_COLUMN = "Seen/Heard"

# Excel stores dates as days since 1899-12-30 (accounting for its 1900 leap-year bug)
EXCEL_EPOCH = pd.Timestamp("1899-12-30")

ISO_DATE = re.compile(r"^\d{4}-\d{1,2}-\d{1,2}")
DAY_MONTH_NAME = re.compile(r"^(\d{1,2})-([A-Za-z]{3})-(\d{2,4})$")


def parse_observation_date(value: Any) -> datetime | None:
    """Parse the date formats found in survey spreadsheets

    Supported inputs:
    - Excel serial numbers (e.g. 45383)
    - "YYYY-MM-DD"
    - "DD/MM/YYYY"
    - "DD-Mon-YY" or "DD-Mon-YYYY" (two-digit years are taken as 20xx)
    - datetime / pandas Timestamp instances

    Returns:
        The parsed datetime, or None if the value cannot be interpreted
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return None if pd.isna(value) else value

    if isinstance(value, numbers.Real):
        if pd.isna(value):
            return None
        return (EXCEL_EPOCH + pd.to_timedelta(float(value), unit="D")).to_pydatetime()

    if not isinstance(value, str):
        return None

    text = value.strip()
    try:
        iso = ISO_DATE.match(text)
        if iso:
            return datetime.strptime(iso.group(0), "%Y-%m-%d")

        if "/" in text:
            day, month, year = text.split("/")
            return datetime(int(year), int(month), int(day))

        match = DAY_MONTH_NAME.match(text)
        if match:
            day, month_name, year = match.groups()
            if len(year) == 2:
                year = "20" + year
            month = datetime.strptime(month_name.title(), "%b").month
            return datetime(int(year), month, int(day))
    except ValueError:
        return None

    return None


def _iter_records(records: Iterable[Mapping[str, Any]] | pd.DataFrame):
    if isinstance(records, pd.DataFrame):
        yield from records.to_dict(orient="records")
    else:
        yield from records


def count_by_month_year(records: Iterable[Mapping[str, Any]] | pd.DataFrame) -> list[TimeSeriesPoint]:
    """Group raw observations into one TimeSeriesPoint per calendar month

    Args:
        records: Rows with "Date" and "Seen/Heard" fields, either as mappings
                 or as a pandas DataFrame

    Returns:
        Chronologically ordered points covering every month between the
        earliest and latest valid observation
    """
    outcomes = {outcome.value: outcome for outcome in ObservationType}

    rows = []
    skipped = 0
    for record in _iter_records(records):
        date = parse_observation_date(record.get(DATE_COLUMN))
        outcome = outcomes.get(record.get(OUTCOME_COLUMN))
        if date is None or outcome is None:
            skipped += 1
            continue
        rows.append({"month": pd.Period(date, freq="M"), "outcome": outcome.value})

    if not rows:
        logger.info("No valid observations to aggregate", skipped=skipped)
        return []

    frame = pd.DataFrame(rows)
    counts = (
        frame.groupby(["month", "outcome"]).size().unstack(fill_value=0)
        .reindex(columns=list(outcomes), fill_value=0)
    )

    full_range = pd.period_range(counts.index.min(), counts.index.max(), freq="M")
    counts = counts.reindex(full_range, fill_value=0)

    points = [
        TimeSeriesPoint(
            period_key=make_period_key(period.month, period.year),
            seen=int(row[ObservationType.SEEN.value]),
            heard=int(row[ObservationType.HEARD.value]),
            not_found=int(row[ObservationType.NOT_FOUND.value]),
        )
        for period, row in counts.iterrows()
    ]

    logger.debug(
        "Observations aggregated",
        observations=len(rows),
        skipped=skipped,
        periods=len(points),
        first=points[0].period_key,
        last=points[-1].period_key,
    )

    return points


def summarize(points: list[TimeSeriesPoint]) -> dict[str, Any]:
    """Totals per outcome and their rounded share of all observations"""
    seen = sum(p.seen for p in points)
    heard = sum(p.heard for p in points)
    not_found = sum(p.not_found for p in points)
    total = seen + heard + not_found

    def share(count: int) -> int:
        return math.floor(count / total * 100 + 0.5) if total else 0

    return {
        "periods": len(points),
        "total": total,
        "seen": seen,
        "heard": heard,
        "not_found": not_found,
        "seen_percent": share(seen),
        "heard_percent": share(heard),
        "not_found_percent": share(not_found),
    }
