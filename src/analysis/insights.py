"""
Templated insights for forecasts and anomalies.

Texts keep the "ML Analysis" / "ML Forecast" / "ML Anomaly Detection"
prefixes that existing displays look for; new consumers should filter on
Insight.category instead.
"""

from src.observations.models import TimeSeriesPoint
from src.observations.periods import format_period

from .models import AnomalyRecord, ForecastPoint, Insight, InsightCategory

STABLE_TREND_PERCENT = 5.0
RECENT_PERIODS = 3

INSUFFICIENT_DATA_TEXT = (
    "Not enough data for meaningful machine learning analysis. Need at least {required} time periods."
)
TRAINING_FAILURE_TEXT = "Error during machine learning analysis. Please try again."


def _months(count: int) -> str:
    return f"{count} month{'s' if count != 1 else ''}"


def trend_percent(current_avg: float, forecast_avg: float) -> float | None:
    """Relative change from current to forecast average, rounded to 0.1

    Returns None when the current average is zero and the change has no
    finite percentage.
    """
    if current_avg == 0:
        return 0.0 if forecast_avg == 0 else None
    return round((forecast_avg - current_avg) / current_avg * 100, 1)


def forecast_insights(points: list[TimeSeriesPoint], forecasts: list[ForecastPoint]) -> list[Insight]:
    """Trend and forecast-value insights for a completed forecast"""
    recent = [point.total for point in points[-RECENT_PERIODS:]]
    current_avg = sum(recent) / len(recent)
    forecast_avg = sum(f.total for f in forecasts) / len(forecasts)
    horizon = f"the next {_months(len(forecasts))}"

    trend = trend_percent(current_avg, forecast_avg)
    if trend is None:
        text = f"ML Analysis: Population is predicted to increase over {horizon}."
    elif abs(trend) < STABLE_TREND_PERCENT:
        text = f"ML Analysis: Population is predicted to remain stable over {horizon}."
    elif trend > 0:
        text = f"ML Analysis: Population is predicted to increase by approximately {trend}% over {horizon}."
    else:
        text = f"ML Analysis: Population is predicted to decrease by approximately {abs(trend)}% over {horizon}."

    values = ", ".join(str(f.total) for f in forecasts)
    return [
        Insight(InsightCategory.TREND, text),
        Insight(
            InsightCategory.FORECAST,
            f"ML Forecast: Next {_months(len(forecasts))} predicted observation counts: {values}",
        ),
    ]


def anomaly_insights(anomalies: list[AnomalyRecord]) -> list[Insight]:
    """Count and detail insights for anomalies sorted by descending score"""
    if not anomalies:
        return [
            Insight(
                InsightCategory.ANOMALY_COUNT,
                "ML Anomaly Detection: No significant anomalies detected in the observation patterns.",
            )
        ]

    count = len(anomalies)
    top = anomalies[0]
    return [
        Insight(
            InsightCategory.ANOMALY_COUNT,
            f"ML Anomaly Detection: {count} unusual observation pattern{'s' if count > 1 else ''} detected.",
        ),
        Insight(
            InsightCategory.ANOMALY_DETAIL,
            f"Most significant anomaly: {format_period(top.period_key)} "
            "with unusual distribution of observation types.",
        ),
    ]


def insufficient_data_insight(required: int) -> Insight:
    return Insight(InsightCategory.STATUS, INSUFFICIENT_DATA_TEXT.format(required=required))


def training_failure_insight() -> Insight:
    return Insight(InsightCategory.STATUS, TRAINING_FAILURE_TEXT)


def combine_insights(forecast: list[Insight], anomaly: list[Insight]) -> list[Insight]:
    """Forecast insights followed by anomaly insights"""
    return [*forecast, *anomaly]


def filter_insights(insights: list[Insight], *categories: InsightCategory) -> list[Insight]:
    return [insight for insight in insights if insight.category in categories]
