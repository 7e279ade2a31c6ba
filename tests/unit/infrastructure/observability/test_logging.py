"""Tests for structured logging."""

import json
import logging
import sys

import pytest

from tunescout.infrastructure.observability.logging import (
    CompactExceptionFormatter,
    CorrelationIdFilter,
    CustomJsonFormatter,
    configure_logging,
    correlation_scope,
    get_correlation_id,
)


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestCorrelationId:
    """Test correlation ID functionality."""

    def test_scope_sets_and_restores_id(self):
        """Test that the ID is bound inside the block only."""
        assert get_correlation_id() == ""
        with correlation_scope("search-123") as cid:
            assert cid == "search-123"
            assert get_correlation_id() == "search-123"
        assert get_correlation_id() == ""

    def test_scope_generates_uuid_when_none(self):
        """Test that a missing ID becomes a fresh UUID."""
        with correlation_scope() as cid:
            assert len(cid) == 36
            assert get_correlation_id() == cid

    def test_nested_scope_keeps_outer_id(self):
        with correlation_scope("outer"), correlation_scope() as inner:
            assert inner == "outer"
            assert get_correlation_id() == "outer"

    def test_explicit_id_overrides_outer_id(self):
        with correlation_scope("outer"):
            with correlation_scope("inner"):
                assert get_correlation_id() == "inner"
            assert get_correlation_id() == "outer"

    def test_filter_adds_id_to_record(self):
        record = logging.LogRecord("t", logging.INFO, __file__, 1, "msg", None, None)

        with correlation_scope("abc"):
            assert CorrelationIdFilter().filter(record)
        assert record.correlation_id == "abc"  # type: ignore[attr-defined]


class TestLoggingConfiguration:
    """Test logging configuration."""

    def test_configure_logging_debug_level(self):
        configure_logging(log_level="DEBUG", json_format=False)
        assert logging.getLogger("test").getEffectiveLevel() <= logging.DEBUG

    def test_replaces_existing_handlers(self):
        configure_logging(log_level="INFO")
        configure_logging(log_level="INFO")
        assert len(logging.getLogger().handlers) == 1

    def test_json_format_uses_json_formatter(self):
        configure_logging(log_level="INFO", json_format=True)
        handler = logging.getLogger().handlers[0]
        assert isinstance(handler.formatter, CustomJsonFormatter)

    def test_text_format_uses_compact_formatter(self):
        configure_logging(log_level="INFO", json_format=False)
        handler = logging.getLogger().handlers[0]
        assert isinstance(handler.formatter, CompactExceptionFormatter)

    def test_quiets_httpx(self):
        configure_logging(log_level="DEBUG")
        assert logging.getLogger("httpx").level == logging.WARNING


class TestFormatters:
    def test_json_output_has_custom_fields(self):
        formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
        record = logging.LogRecord(
            "tunescout.test", logging.WARNING, __file__, 42, "hello %s", ("world",), None
        )
        record.correlation_id = "cid-1"

        data = json.loads(formatter.format(record))

        assert data["message"] == "hello world"
        assert data["level"] == "WARNING"
        assert data["logger"] == "tunescout.test"
        assert data["line"] == 42
        assert data["correlation_id"] == "cid-1"

    def test_compact_exception_shows_root_cause_first(self):
        try:
            try:
                raise KeyError("items")
            except KeyError as e:
                raise ValueError("bad payload") from e
        except ValueError:
            text = CompactExceptionFormatter().formatException(sys.exc_info())

        lines = [line for line in text.splitlines() if line.startswith("╰─►")]
        assert lines[0].startswith("╰─► KeyError")
        assert lines[1] == "╰─► ValueError: bad payload"
