"""Logging configuration for trialforms.

Applications embedding the engine call ``trialforms.setup_logging()`` once at
startup; modules only ever ask for a logger through ``get_logger``.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.stdlib import BoundLogger, LoggerFactory

from trialforms.config import get_settings


def setup_logging() -> None:
    """Configure structured logging for the engine."""
    settings = get_settings()

    # Configure standard library logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level.upper()),
    )

    # Configure structlog
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            render_processor(),
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def render_processor() -> Any:
    """Choose renderer based on settings."""
    settings = get_settings()

    if settings.log_format == "json":
        return structlog.processors.JSONRenderer()
    else:
        return structlog.dev.ConsoleRenderer()


def get_logger(name: str) -> BoundLogger:
    """Get a configured logger instance."""
    bound_logger: BoundLogger = structlog.get_logger(name)
    return bound_logger
