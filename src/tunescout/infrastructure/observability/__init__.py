"""Observability infrastructure for structured logging."""

from tunescout.infrastructure.observability.log_messages import LogMessages, LogTemplate
from tunescout.infrastructure.observability.logging import (
    configure_logging,
    correlation_scope,
    get_correlation_id,
)

__all__ = [
    "LogMessages",
    "LogTemplate",
    "configure_logging",
    "correlation_scope",
    "get_correlation_id",
]
