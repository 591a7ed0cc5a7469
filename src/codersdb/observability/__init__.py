"""Observability helpers: structured logging via structlog."""

from codersdb.observability.logging import (
    bind_store_context,
    clear_store_context,
    get_logger,
    setup_logging,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "bind_store_context",
    "clear_store_context",
]
