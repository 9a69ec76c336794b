"""Structured logging configuration.

This module initializes a structlog logger with a stable JSON format.
Events are routed through stdlib logging so CLI output on stdout stays
reserved for command results.
"""

from __future__ import annotations

import logging
from typing import Any

import structlog


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog logger with structured output.
    """
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    return structlog.get_logger(name)


def configure_log_output(level: int = logging.INFO) -> None:
    """Send rendered log events to stderr at the given level.

    Args:
        level: Minimum stdlib log level to emit.
    """
    logging.basicConfig(level=level, format="%(message)s")
