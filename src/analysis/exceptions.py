"""
Errors raised by the analysis pipeline.
"""


class AnalysisError(Exception):
    """Base class for analysis errors"""


class InsufficientDataError(AnalysisError):
    """Raised when the series is too short to train on"""

    def __init__(self, required: int, actual: int):
        self.required = required
        self.actual = actual
        super().__init__(f"Insufficient periods: {actual} < {required}")


class TrainingFailure(AnalysisError):
    """Raised when a model fails numerically during training or inference"""

    def __init__(self, stage: str, message: str):
        self.stage = stage
        super().__init__(f"{stage}: {message}")


class StaleRunError(AnalysisError):
    """Raised inside a run that was cancelled or superseded by a newer one"""

    def __init__(self, generation: int, active_generation: int):
        self.generation = generation
        self.active_generation = active_generation
        super().__init__(f"Run {generation} superseded by run {active_generation}")
