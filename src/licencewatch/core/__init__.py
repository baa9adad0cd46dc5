"""Core services and utilities for Licencewatch."""

from .logging import (
    LogContext,
    bind_contextvars,
    clear_contextvars,
    get_logger,
    log_exception,
    log_external_call,
    setup_logging,
    unbind_contextvars,
)

__all__ = [
    "LogContext",
    "bind_contextvars",
    "clear_contextvars",
    "get_logger",
    "log_exception",
    "log_external_call",
    "setup_logging",
    "unbind_contextvars",
]
