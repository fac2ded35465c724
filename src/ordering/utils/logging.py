"""Logging configuration for the Ordering domain."""

import logging
import os

import structlog

logger = structlog.get_logger(__name__)

# Suppress noisy library loggers
logging.getLogger("protean").setLevel(logging.WARNING)


def configure_logging(level: str | None = None, fmt: str | None = None) -> None:
    """Configure structlog for the API server and the management CLI.

    ``LOG_LEVEL`` and ``LOG_FORMAT`` (``console`` or ``json``) are read from the
    environment when not passed explicitly.
    """
    level_name = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    renderer = (
        structlog.processors.JSONRenderer()
        if (fmt or os.environ.get("LOG_FORMAT", "console")) == "json"
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level_name)),
        cache_logger_on_first_use=True,
    )
