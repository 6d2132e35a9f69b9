"""
Logging configuration using structlog.

Scheduled runs log JSON lines so the job output can be searched after the
fact; the console renderer is meant for running a pass by hand.
"""

from typing import Any, Literal

import structlog

LogFormat = Literal["json", "console"]


def configure_logging(log_level: str = "INFO", log_format: LogFormat = "json") -> None:
    """Configure structlog for the process.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: "json" for one JSON object per line, "console" for
            human-readable output
    """
    renderer: Any
    if log_format == "console":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level.upper()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
