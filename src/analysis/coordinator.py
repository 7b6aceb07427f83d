"""
Training coordinator for the forecast and anomaly analysis.

Runs the forecaster and then the anomaly detector on one series, publishes
progress events at epoch checkpoints and assembles the combined result.

Each run gets a generation number. Starting a new run or calling cancel()
makes older runs stale: they stop at their next checkpoint and never write
progress or results.
"""

import asyncio
import math
from collections.abc import Callable, Iterable

import structlog

from src.observations.models import TimeSeriesPoint

from .exceptions import InsufficientDataError, StaleRunError
from .insights import combine_insights, insufficient_data_insight, training_failure_insight
from .methods import AutoencoderDetector, MLPForecaster, get_method
from .methods.base import DetectionResult, ForecastResult
from .models import AnalysisConfig, AnalysisResult, TrainingProgress, TrainingState

logger = structlog.get_logger(__name__)

ProgressCallback = Callable[[TrainingProgress], None]


class TrainingCoordinator:
    """Orchestrates both trainings and exposes their progress"""

    def __init__(self, config: AnalysisConfig | None = None, on_progress: ProgressCallback | None = None):
        self.config = config or AnalysisConfig()
        self.on_progress = on_progress

        self._generation = 0
        self._state = TrainingState.IDLE
        self._progress = 0
        self._result: AnalysisResult | None = None
        self._task: asyncio.Task | None = None

        logger.debug(
            "Coordinator initialized",
            forecast_method=self.config.forecast_method,
            anomaly_method=self.config.anomaly_method,
            horizon=self.config.horizon,
        )

    @property
    def state(self) -> TrainingState:
        return self._state

    @property
    def progress(self) -> int:
        return self._progress

    @property
    def result(self) -> AnalysisResult | None:
        return self._result

    @property
    def generation(self) -> int:
        return self._generation

    def start(self, points: Iterable[TimeSeriesPoint]) -> asyncio.Task:
        """Schedule a run on the running event loop

        Returns:
            The task; awaiting it yields the run's result
        """
        self._task = asyncio.get_running_loop().create_task(self.run(points))
        return self._task

    def cancel(self) -> None:
        """Abort the in-flight run and return to IDLE"""
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

        self._state = TrainingState.IDLE
        self._progress = 0
        self._result = None
        logger.info("Training cancelled", generation=self._generation)

    async def run(self, points: Iterable[TimeSeriesPoint]) -> AnalysisResult | None:
        """Train both models on the series and return the combined result

        Returns:
            The result of this run, or None if the run was superseded or
            cancelled before it finished
        """
        self._generation += 1
        generation = self._generation
        points = list(points)

        self._result = None
        self._progress = 0
        self._transition(generation, TrainingState.VALIDATING, 0)

        logger.info("Starting analysis", generation=generation, periods=len(points))

        try:
            self._validate(points)
        except InsufficientDataError as e:
            logger.warning(
                "Insufficient data for analysis",
                generation=generation,
                periods=e.actual,
                required=e.required,
            )
            return self._finish(
                generation,
                TrainingState.ERROR,
                AnalysisResult(insights=[insufficient_data_insight(e.required)]),
            )

        try:
            forecast = await self._train_forecaster(generation, points)
            detection = await self._train_detector(generation, points)
        except StaleRunError as e:
            logger.info("Discarding stale run", generation=e.generation, active=e.active_generation)
            return None
        except Exception as e:
            logger.error("Analysis failed", generation=generation, error=str(e), exc_info=True)
            if generation != self._generation:
                return None
            return self._finish(
                generation,
                TrainingState.ERROR,
                AnalysisResult(insights=[training_failure_insight()]),
            )

        if generation != self._generation:
            logger.info("Discarding stale run", generation=generation, active=self._generation)
            return None

        result = AnalysisResult(
            forecasts=forecast.forecasts,
            anomalies=detection.anomalies,
            insights=combine_insights(forecast.insights, detection.insights),
        )
        return self._finish(generation, TrainingState.COMPLETED, result, percent=100)

    def _validate(self, points: list[TimeSeriesPoint]) -> None:
        if len(points) < self.config.min_periods:
            raise InsufficientDataError(required=self.config.min_periods, actual=len(points))

    async def _train_forecaster(self, generation: int, points: list[TimeSeriesPoint]) -> ForecastResult:
        self._transition(generation, TrainingState.TRAINING_FORECASTER, 15)
        self._emit(generation, 20)

        forecaster = get_method(self.config.forecast_method, self.config.forecast_config())
        if not isinstance(forecaster, MLPForecaster):
            raise ValueError(f"'{self.config.forecast_method}' is not a forecasting method")
        self._emit(generation, 25)

        await self._drive(generation, forecaster.iter_fit(points), forecaster.epochs, start=30, span=10)
        self._emit(generation, 40)

        forecast = forecaster.result(self.config.horizon)
        self._emit(generation, 50)
        return forecast

    async def _train_detector(self, generation: int, points: list[TimeSeriesPoint]) -> DetectionResult:
        self._transition(generation, TrainingState.TRAINING_ANOMALY_DETECTOR, 60)
        self._emit(generation, 65)

        detector = get_method(self.config.anomaly_method, self.config.anomaly_config())
        if not isinstance(detector, AutoencoderDetector):
            raise ValueError(f"'{self.config.anomaly_method}' is not an anomaly detection method")
        self._emit(generation, 70)

        await self._drive(generation, detector.iter_fit(points), detector.epochs, start=75, span=5)
        self._emit(generation, 80)

        detection = detector.detect()
        self._emit(generation, 85)
        return detection

    async def _drive(self, generation: int, epochs, total_epochs: int, start: int, span: int) -> None:
        """Advance a training generator, yielding to the event loop at checkpoints"""
        for epoch in epochs:
            if epoch % self.config.checkpoint_every == 0:
                self._emit(generation, start + math.floor(epoch / total_epochs * span))
                await asyncio.sleep(0)
                self._ensure_active(generation)

    def _ensure_active(self, generation: int) -> None:
        if generation != self._generation:
            raise StaleRunError(generation, self._generation)

    def _emit(self, generation: int, percent: int) -> None:
        self._ensure_active(generation)
        self._progress = max(self._progress, percent)

        logger.debug("Training progress", generation=generation, percent=self._progress, state=self._state.value)

        if self.on_progress is not None:
            self.on_progress(TrainingProgress(percent=self._progress, state=self._state, generation=generation))

    def _transition(self, generation: int, state: TrainingState, percent: int) -> None:
        self._ensure_active(generation)
        self._state = state
        self._emit(generation, percent)

    def _finish(
        self, generation: int, state: TrainingState, result: AnalysisResult, percent: int | None = None
    ) -> AnalysisResult:
        self._ensure_active(generation)
        self._result = result
        self._transition(generation, state, self._progress if percent is None else percent)

        logger.info(
            "Analysis finished",
            generation=generation,
            state=state.value,
            forecasts=len(result.forecasts),
            anomalies=len(result.anomalies),
            insights=len(result.insights),
        )
        return result


def analyze(
    points: Iterable[TimeSeriesPoint],
    config: AnalysisConfig | None = None,
    on_progress: ProgressCallback | None = None,
) -> AnalysisResult:
    """Run one analysis to completion outside of an event loop"""
    coordinator = TrainingCoordinator(config, on_progress=on_progress)
    return asyncio.run(coordinator.run(points))
