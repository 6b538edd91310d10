"""Tests for the structured logging system (tour_kernel/logging_config.py)."""

import json
import logging
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from tour_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests, then restore the suite config."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()
    configure_logging(level=logging.DEBUG)


def _make_handler() -> tuple[logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_log(stream: StringIO) -> dict:
    """Parse the first JSON log line from a stream."""
    line = stream.getvalue().strip().split("\n")[0]
    return json.loads(line)


def _parse_all_logs(stream: StringIO) -> list[dict]:
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


# ---------------------------------------------------------------------------
# StructuredFormatter tests
# ---------------------------------------------------------------------------


class TestStructuredFormatter:
    """Tests for JSON log output format."""

    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("hello")

        record = _parse_log(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "tour_kernel.test"
        assert "ts" in record

    def test_extra_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("debt_synced", extra={"count": 2, "status": "created"})

        record = _parse_log(stream)
        assert record["count"] == 2
        assert record["status"] == "created"

    def test_decimal_and_uuid_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        uid = uuid4()
        get_logger("test").info("amounts", extra={"amount": Decimal("10.50"), "debt_id": uid})

        record = _parse_log(stream)
        assert record["amount"] == "10.50"
        assert record["debt_id"] == str(uid)

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        LogContext.set(correlation_id="abc-123", reservation_id="res-1")
        get_logger("test").info("test_msg")

        record = _parse_log(stream)
        assert record["correlation_id"] == "abc-123"
        assert record["reservation_id"] == "res-1"

    def test_no_context_fields_when_empty(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("bare_message")

        record = _parse_log(stream)
        assert "correlation_id" not in record
        assert "period_code" not in record

    def test_exception_fields(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        try:
            raise ValueError("boom")
        except ValueError:
            get_logger("test").error("failed", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_type"] == "ValueError"
        assert record["exc_message"] == "boom"
        assert "traceback" in record

    def test_ledger_exception_code_extracted(self):
        """Tour ledger exceptions carry a .code attribute and structured fields."""
        from tour_kernel.exceptions import PeriodNotFoundError

        handler, stream = _make_handler()
        configure_logging(handler=handler)
        try:
            raise PeriodNotFoundError("2024-07")
        except PeriodNotFoundError:
            get_logger("test").error("period_error", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_code"] == "PERIOD_NOT_FOUND"
        assert record["exc_type"] == "PeriodNotFoundError"
        assert "2024-07" in record["exc_message"]

    def test_valid_json_every_line(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("first")
        logger.warning("second", extra={"k": "v"})
        logger.debug("third")

        logs = _parse_all_logs(stream)
        # INFO is the default level
        assert len(logs) == 2
        for record in logs:
            assert {"ts", "level", "logger", "message"} <= record.keys()


# ---------------------------------------------------------------------------
# LogContext tests
# ---------------------------------------------------------------------------


class TestLogContext:
    """Tests for context propagation."""

    def test_set_and_get(self):
        LogContext.set(correlation_id="x", operation="debt_sync")
        assert LogContext.get_all() == {"correlation_id": "x", "operation": "debt_sync"}

    def test_none_values_ignored(self):
        LogContext.set(correlation_id="x", actor_id=None)
        assert LogContext.get_all() == {"correlation_id": "x"}

    def test_unknown_field_rejected(self):
        with pytest.raises(KeyError):
            LogContext.set(tenant="t")

    def test_clear(self):
        LogContext.set(correlation_id="x")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_bind_context_manager(self):
        LogContext.set(correlation_id="outer")
        with LogContext.bind(correlation_id="inner", period_code="2024-06"):
            assert LogContext.get_all()["correlation_id"] == "inner"
            assert LogContext.get_all()["period_code"] == "2024-06"
        assert LogContext.get_all() == {"correlation_id": "outer"}

    def test_bind_restores_none(self):
        with LogContext.bind(reservation_id="temp"):
            assert LogContext.get_all()["reservation_id"] == "temp"
        assert "reservation_id" not in LogContext.get_all()

    def test_bind_restores_on_error(self):
        with pytest.raises(RuntimeError):
            with LogContext.bind(operation="period_recompute"):
                raise RuntimeError("stop")
        assert LogContext.get_all() == {}


# ---------------------------------------------------------------------------
# configure_logging tests
# ---------------------------------------------------------------------------


class TestConfigureLogging:
    """Tests for initialization."""

    def test_idempotent(self):
        h1, _ = _make_handler()
        configure_logging(handler=h1)
        h2, _ = _make_handler()
        configure_logging(handler=h2)  # second call is no-op
        assert len(logging.getLogger("tour_kernel").handlers) == 1

    def test_get_logger_returns_child(self):
        assert get_logger("services.period_rollup").name == "tour_kernel.services.period_rollup"

    def test_logger_hierarchy(self):
        """Child loggers inherit the tour_kernel root config."""
        handler, stream = _make_handler()
        configure_logging(handler=handler, level=logging.DEBUG)
        get_logger("deep.nested.module").debug("hierarchy_test")

        record = _parse_log(stream)
        assert record["message"] == "hierarchy_test"
        assert record["logger"] == "tour_kernel.deep.nested.module"
