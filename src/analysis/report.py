"""
CLI for forecasting and anomaly analysis of survey observations.

Usage:
    python -m src.analysis.report observations.csv [options]
"""

import argparse
import asyncio
import json
import logging
import os
import sys

import pandas as pd
import structlog

from src.core.logger import setup_logging
from src.observations.aggregator import count_by_month_year, summarize

from .coordinator import TrainingCoordinator
from .methods import list_methods
from .models import AnalysisConfig, TrainingProgress, TrainingState

logger = structlog.get_logger(__name__)


def parse_arguments(argv: list[str] | None = None):
    """Parse command-line arguments"""
    parser = argparse.ArgumentParser(
        description="Forecast survey observation totals and flag anomalous months",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
        Examples:
        # Basic usage
        python -m src.analysis.report observations.csv

        # Reproducible run with a longer horizon
        python -m src.analysis.report observations.csv --horizon 6 --seed 42

        # Write the result to a file
        python -m src.analysis.report observations.xlsx --output result.json
        """,
    )

    parser.add_argument(
        "input",
        help="CSV or Excel file with 'Date' and 'Seen/Heard' columns",
    )
    parser.add_argument(
        "--output",
        help="Write the JSON result to this file (default: stdout)",
    )

    # Forecast configuration
    parser.add_argument(
        "--horizon",
        type=int,
        default=int(os.getenv("FORECAST_HORIZON", "3")),
        help="Number of months to forecast (default: 3 or FORECAST_HORIZON env var)",
    )
    parser.add_argument(
        "--forecaster-epochs",
        type=int,
        default=100,
        help="Forecaster training epochs (default: 100)",
    )

    # Anomaly configuration
    parser.add_argument(
        "--anomaly-epochs",
        type=int,
        default=50,
        help="Autoencoder training epochs (default: 50)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=4,
        help="Autoencoder batch size (default: 4)",
    )
    parser.add_argument(
        "--sigma",
        type=float,
        default=2.0,
        help="Standard deviations above the mean error that mark an anomaly (default: 2.0)",
    )
    parser.add_argument(
        "--anomaly-method",
        default="autoencoder",
        choices=list_methods(),
        help="Anomaly detection method (default: autoencoder)",
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=int(os.environ["ANALYSIS_SEED"]) if os.getenv("ANALYSIS_SEED") else None,
        help="Seed for reproducible training (default: random or ANALYSIS_SEED env var)",
    )

    # Logging
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=os.getenv("LOG_LEVEL", "INFO"),
        help="Logging level (default: INFO)",
    )

    return parser.parse_args(argv)


def build_config(args) -> AnalysisConfig:
    """Build configuration from arguments"""
    return AnalysisConfig(
        anomaly_method=args.anomaly_method,
        horizon=args.horizon,
        forecaster_epochs=args.forecaster_epochs,
        anomaly_epochs=args.anomaly_epochs,
        anomaly_batch_size=args.batch_size,
        anomaly_sigma_threshold=args.sigma,
        seed=args.seed,
    )


def load_observations(path: str) -> pd.DataFrame:
    """Read raw observation rows from a CSV or Excel file"""
    if path.lower().endswith((".xlsx", ".xls")):
        return pd.read_excel(path)
    return pd.read_csv(path)


def log_progress(progress: TrainingProgress) -> None:
    logger.info("Training progress", percent=progress.percent, state=progress.state.value)


def main(argv: list[str] | None = None) -> int:
    """Main entry point"""
    args = parse_arguments(argv)

    # Setup logging
    log_level = getattr(logging, args.log_level)
    setup_logging(level=log_level, json_output=os.getenv("LOG_FORMAT") == "json")

    logger.info("Starting survey analysis", input=args.input)

    try:
        config = build_config(args)
        points = count_by_month_year(load_observations(args.input))
        logger.info("Observations aggregated", **summarize(points))

        coordinator = TrainingCoordinator(config, on_progress=log_progress)
        result = asyncio.run(coordinator.run(points))

        payload = json.dumps(
            {"state": coordinator.state.value, "periods": [p.to_dict() for p in points], **result.to_dict()},
            indent=2,
        )
        if args.output:
            with open(args.output, "w", encoding="utf-8") as f:
                f.write(payload)
            logger.info("Result written", output=args.output)
        else:
            print(payload)

        # Too few periods is reported as an insight, only training failures are errors
        training_failed = coordinator.state == TrainingState.ERROR and len(points) >= config.min_periods
        return 1 if training_failed else 0

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0

    except Exception as e:
        logger.error("Analysis failed", error=str(e), exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
