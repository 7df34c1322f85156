"""
utils/logging.py — structlog configuration for the pipeline.

Sets up structured logging with JSON or human-readable console output.
Call configure_logging() once at process startup (done automatically by
the CLI).

Usage:
    from econpulse_pipeline.utils.logging import configure_logging, get_logger

    configure_logging(log_level="INFO", log_format="console")
    log = get_logger("econpulse_pipeline.sources.fred")
    log.info("fred_fetch", series_id="UNRATE")

    # Bind context for all subsequent log calls:
    log = log.bind(country="US", indicator="inflation")
    log.info("indicator_ready", points=60)
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------


def configure_logging(
    log_level: str | None = None,
    log_format: str | None = None,
) -> None:
    """
    Configure structlog for the pipeline process.

    Should be called once at startup. Idempotent.

    Args:
        log_level:  "DEBUG", "INFO", … (default: settings.log_level).
        log_format: "json" | "console" (default: settings.log_format).
    """
    if log_level is None or log_format is None:
        from econpulse_shared.config import get_settings

        settings = get_settings()
        level = log_level or settings.log_level
        fmt = log_format or settings.log_format
    else:
        level, fmt = log_level, log_format

    numeric_level = getattr(logging, level.upper(), logging.INFO)

    # Standard library logging integration (httpx warnings log through here)
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=numeric_level,
    )
    # httpx logs full request URLs at INFO, including the FRED api_key query param
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    # Shared processors used in both modes
    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
    ]

    if fmt == "json":
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str, **initial_values: Any) -> structlog.BoundLogger:
    """
    Return a bound structlog logger with optional initial context values.

    Args:
        name:             Logger name (conventionally the module __name__).
        **initial_values: Key-value pairs merged into every log record.

    Returns:
        structlog.BoundLogger
    """
    logger = structlog.get_logger(name)
    if initial_values:
        logger = logger.bind(**initial_values)
    return logger  # type: ignore[return-value]
