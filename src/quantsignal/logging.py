"""Structured logging for the signal engine, built on structlog.

Pure formula modules never log. The analysis engine binds the asset symbol
into the context so every event emitted during one analysis carries it,
including events from the worker threads of the formula fan-out.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from quantsignal.config import AppSettings


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def setup_logging(log_level: str = "INFO", log_format: str | None = None) -> None:
    """Configure structlog over stdlib logging.

    Args:
        log_level: Root log level name. Unknown names fall back to INFO.
        log_format: "json" or "console". When None, the LOG_FORMAT
            environment variable decides, defaulting to "console".
    """
    log_format = (log_format or os.environ.get("LOG_FORMAT", "console")).lower()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_format),
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def configure_from_settings(settings: AppSettings) -> None:
    """Apply the log level and format held by AppSettings."""
    setup_logging(settings.log_level, settings.log_format)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger with the given name."""
    return structlog.get_logger(name)
