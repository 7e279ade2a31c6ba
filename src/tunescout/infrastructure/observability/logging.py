"""Structured logging configuration with JSON formatting and correlation IDs."""

from __future__ import annotations

import contextvars
import logging
import sys
import traceback
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from pythonjsonlogger import jsonlogger

# Hey future me, correlation IDs tie together every log line of ONE search: the aggregator and
# all three provider tasks. asyncio tasks copy the current context when they are created, so a
# correlation ID set before the fan-out shows up in every provider's logs too.
correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default=""
)


def get_correlation_id() -> str:
    """Get the current correlation ID from context.

    Returns:
        Current correlation ID or empty string if not set
    """
    return correlation_id_var.get()


@contextmanager
def correlation_scope(correlation_id: str | None = None) -> Iterator[str]:
    """Bind a correlation ID for the duration of one unit of work.

    An ID that is already bound (e.g. by an outer request handler) is kept.
    Otherwise a new one is set and the previous value restored on exit.

    Yields:
        The correlation ID in effect inside the block
    """
    current = correlation_id_var.get()
    if current and correlation_id is None:
        yield current
        return

    new_id = correlation_id or str(uuid.uuid4())
    token = correlation_id_var.set(new_id)
    try:
        yield new_id
    finally:
        correlation_id_var.reset(token)


class CorrelationIdFilter(logging.Filter):
    """Add correlation ID to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Add correlation_id to record if available."""
        record.correlation_id = get_correlation_id()
        return True


class CompactExceptionFormatter(logging.Formatter):
    """Formatter that prints exception chains compactly, root cause first.

    Example output:
    12:00:01 │ WARNING │ tunescout.infrastructure.providers.base:71 │ Spotify search failed
    ╰─► ConnectError: All connection attempts failed
        File "spotify_client.py", line 88, in search_tracks
          response = await self._api_request(...)
    """

    def formatException(self, ei: Any) -> str:
        """Format exception chain in a compact, readable way.

        Args:
            ei: Exception info tuple (type, value, traceback)

        Returns:
            Formatted exception string with compact chain representation
        """
        _, exc_value, _ = ei
        if exc_value is None:
            return ""

        exceptions: list[BaseException] = []
        current: BaseException | None = exc_value
        while current is not None and current not in exceptions:
            exceptions.append(current)
            current = current.__cause__ or current.__context__
        exceptions.reverse()

        lines: list[str] = []
        for exc in exceptions:
            lines.append(f"╰─► {exc.__class__.__name__}: {exc}")
            if exc.__traceback__ is None:
                continue
            # Only our own frames; library internals are noise here
            for frame in traceback.extract_tb(exc.__traceback__):
                if "/site-packages/" in frame.filename or "tunescout" not in frame.filename:
                    continue
                lines.append(
                    f'    File "{Path(frame.filename).name}", line {frame.lineno}, in {frame.name}'
                )
                if frame.line:
                    lines.append(f"      {frame.line.strip()}")

        return "\n".join(lines)


class CustomJsonFormatter(jsonlogger.JsonFormatter):  # type: ignore[name-defined,misc]
    """Custom JSON formatter with additional fields."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        """Add custom fields to log record.

        Args:
            log_record: Dictionary to be logged as JSON
            record: Python logging record
            message_dict: Message dictionary from format string
        """
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["module"] = record.module
        log_record["function"] = record.funcName
        log_record["line"] = record.lineno

        correlation_id = getattr(record, "correlation_id", "")
        if correlation_id:
            log_record["correlation_id"] = correlation_id

        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)


# Listen future me, this is THE logging setup function - call it ONCE at startup (search_lifespan
# does). It replaces all root handlers, so calling it again (tests, reloads) doesn't duplicate output.
def configure_logging(
    log_level: str = "INFO",
    json_format: bool = False,
    app_name: str = "tunescout",
) -> None:
    """Configure structured logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON format for logs (recommended for production)
        app_name: Application name to include in logs
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    level = getattr(logging, log_level.upper(), logging.INFO)
    root_logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(CorrelationIdFilter())

    if json_format:
        formatter: logging.Formatter = CustomJsonFormatter(
            "%(timestamp)s %(level)s %(name)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        formatter = CompactExceptionFormatter(
            fmt="%(asctime)s │ %(levelname)-7s │ %(name)s:%(lineno)d │ %(message)s",
            datefmt="%H:%M:%S",
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # httpx logs every request at INFO - three per search is too chatty
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("hpack").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging configured",
        extra={
            "app_name": app_name,
            "log_level": log_level,
            "json_format": json_format,
        },
    )
