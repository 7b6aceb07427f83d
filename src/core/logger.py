import logging
import os

import structlog
from dotenv import load_dotenv

load_dotenv()

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def setup_logging(level: int = logging.INFO, json_output: bool = False) -> None:
    """
    Configure structured logging for the analysis engine.

    Args:
        level: The logging level to use. Defaults to INFO.
        json_output: Render events as JSON lines instead of the coloured console format.
    """
    logging.basicConfig(level=level)
    # basicConfig is a no-op once handlers exist, so reapply the level
    logging.getLogger().setLevel(level)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
            pad_event=40,
        )
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        renderer,
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def level_from_env(default: str = "INFO") -> int:
    """Resolve the LOG_LEVEL environment variable to a logging level"""
    name = os.getenv("LOG_LEVEL", default).upper()
    return LOG_LEVELS.get(name, LOG_LEVELS[default])


setup_logging(level=level_from_env(), json_output=os.getenv("LOG_FORMAT") == "json")
