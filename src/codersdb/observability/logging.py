"""Structured logging configuration.

This module sets up structured logging using structlog with JSON or console
output. The library only obtains loggers; configuring output is left to the
application (the ``codersdb`` CLI calls ``setup_logging``).
"""

import logging
import sys

import structlog


def setup_logging(log_level: str = "INFO", json_logs: bool = False) -> None:
    """Configure structured logging with structlog.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: If True, output logs in JSON format; otherwise use console format

    Example:
        >>> setup_logging(log_level="DEBUG")
        >>> logger = get_logger(__name__)
        >>> logger.info("entry_written", key="user1")
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level.upper()),
    )

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_logs:
        renderers = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        renderers = [structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=shared_processors + renderers,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


def bind_store_context(**values: str) -> None:
    """Bind key/value pairs to every log event in the current context.

    Args:
        **values: Context values (e.g. ``db_path="./db.sqlite"``)

    Example:
        >>> bind_store_context(db_path="./db.sqlite")
        >>> logger.info("backup_written")  # Will include db_path
    """
    structlog.contextvars.bind_contextvars(**values)


def clear_store_context() -> None:
    """Remove all values bound with ``bind_store_context``."""
    structlog.contextvars.clear_contextvars()
