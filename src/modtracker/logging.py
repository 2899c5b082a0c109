"""Structured logging configuration for modtracker."""

import logging
import uuid
from typing import Any

import structlog

# Library events are dropped until the application configures logging
logging.getLogger("modtracker").addHandler(logging.NullHandler())


def configure_logging(log_level: str = "INFO", json_output: bool = False) -> None:
    """Configure structured logging with a check ID on every event.

    Library loggers write through the standard library, so nothing is shown
    until an application calls this (or configures ``logging`` itself).

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Render events as JSON lines instead of console text.
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(level=numeric_level, format="%(message)s", force=True)

    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            # Adds check_id while a check is running
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            renderer,
        ],
        context_class=dict,
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> Any:
    """Get a structured logger backed by the standard library logger ``name``.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Structured logger instance
    """
    return structlog.wrap_logger(logging.getLogger(name), wrapper_class=structlog.stdlib.BoundLogger)


def generate_check_id() -> str:
    """Generate a short unique ID for one tracker check."""
    return uuid.uuid4().hex[:12]


class CheckContext:
    """Context manager for setting the check ID in the logging context."""

    def __init__(self, check_id: str | None = None):
        self.check_id = check_id or generate_check_id()
        self.tokens = None

    def __enter__(self):
        self.tokens = structlog.contextvars.bind_contextvars(check_id=self.check_id)
        return self.check_id

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.tokens:
            structlog.contextvars.reset_contextvars(**self.tokens)
