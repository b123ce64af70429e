"""Public observability primitives: per-run structured logging and correlation fields."""

from page_order.observability.logging import (
    LoggingHandle,
    correlation_scope,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    "LoggingHandle",
    "correlation_scope",
    "setup_logging",
    "shutdown_logging",
]
