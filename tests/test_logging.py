"""Tests for the structured logging system (ledger_kernel/logging_config.py)."""

import json
import logging
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from ledger_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
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
        logger = get_logger("test")
        logger.info("hello")

        record = _parse_log(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "ledger_kernel.test"
        assert "ts" in record

    def test_extra_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("posted", extra={"number": "2025-03-0001", "line_count": 3})

        record = _parse_log(stream)
        assert record["number"] == "2025-03-0001"
        assert record["line_count"] == 3

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        LogContext.set(tenant_id="tenant-acme", source_type="INVOICE")
        logger.info("test_msg")

        record = _parse_log(stream)
        assert record["tenant_id"] == "tenant-acme"
        assert record["source_type"] == "INVOICE"

    def test_exception_fields(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        try:
            raise ValueError("boom")
        except ValueError:
            logger.error("failed", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_type"] == "ValueError"
        assert record["exc_message"] == "boom"
        assert "traceback" in record

    def test_ledger_exception_code_extracted(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        from ledger_kernel.exceptions import ClosedPeriodError

        try:
            raise ClosedPeriodError("2025-01")
        except ClosedPeriodError:
            logger.error("period_error", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_code"] == "CLOSED_PERIOD"
        assert record["exc_type"] == "ClosedPeriodError"
        assert record["exc_period"] == "2025-01"

    def test_no_context_fields_when_empty(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("bare_message")

        record = _parse_log(stream)
        assert "tenant_id" not in record
        assert "entry_id" not in record

    def test_uuid_and_decimal_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        uid = uuid4()
        get_logger("test").info(
            "with_values", extra={"entry_id": uid, "total_debit": Decimal("119.00")}
        )

        record = _parse_log(stream)
        assert record["entry_id"] == str(uid)
        assert record["total_debit"] == "119.00"

    def test_valid_json_every_line(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("first")
        logger.warning("second", extra={"k": "v"})
        logger.debug("third")

        logs = _parse_all_logs(stream)
        # default level is INFO, so the debug record is dropped
        assert len(logs) == 2
        for record in logs:
            assert {"ts", "level", "logger", "message"} <= set(record)


# ---------------------------------------------------------------------------
# LogContext tests
# ---------------------------------------------------------------------------


class TestLogContext:
    def test_set_and_get(self):
        LogContext.set(correlation_id="x", tenant_id="y")
        assert LogContext.get_all() == {"correlation_id": "x", "tenant_id": "y"}

    def test_clear(self):
        LogContext.set(correlation_id="x")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_bind_context_manager(self):
        LogContext.set(tenant_id="outer")
        with LogContext.bind(tenant_id="inner"):
            assert LogContext.get_all()["tenant_id"] == "inner"
        assert LogContext.get_all()["tenant_id"] == "outer"

    def test_bind_restores_none(self):
        assert "actor_id" not in LogContext.get_all()
        with LogContext.bind(actor_id="temp"):
            assert LogContext.get_all()["actor_id"] == "temp"
        assert "actor_id" not in LogContext.get_all()

    def test_bind_stringifies_values(self):
        uid = uuid4()
        with LogContext.bind(entry_id=uid):
            assert LogContext.get_all()["entry_id"] == str(uid)

    def test_bind_ignores_unknown_fields(self):
        with LogContext.bind(not_a_field="x", tenant_id="t"):
            assert LogContext.get_all() == {"tenant_id": "t"}

    def test_set_rejects_unknown_fields(self):
        with pytest.raises(TypeError, match="not_a_field"):
            LogContext.set(not_a_field="x")

    def test_bind_restores_on_error(self):
        with pytest.raises(RuntimeError):
            with LogContext.bind(tenant_id="t"):
                raise RuntimeError("boom")
        assert LogContext.get_all() == {}

    def test_all_fields(self):
        LogContext.set(
            correlation_id="c",
            tenant_id="t",
            actor_id="a",
            entry_id="e",
            source_type="s",
            source_doc_id="d",
        )
        ctx = LogContext.get_all()
        assert len(ctx) == 6
        assert ctx["source_doc_id"] == "d"


# ---------------------------------------------------------------------------
# configure_logging tests
# ---------------------------------------------------------------------------


class TestConfigureLogging:
    def test_idempotent(self):
        h1, _ = _make_handler()
        configure_logging(handler=h1)
        h2, _ = _make_handler()
        configure_logging(handler=h2)  # second call is no-op
        root = logging.getLogger("ledger_kernel")
        # pytest may attach its own capture handlers to the logger
        structured = [h for h in root.handlers if isinstance(h.formatter, StructuredFormatter)]
        assert structured == [h1]

    def test_get_logger_returns_child(self):
        logger = get_logger("services.journal")
        assert logger.name == "ledger_kernel.services.journal"

    def test_logger_hierarchy(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler, level=logging.DEBUG)
        get_logger("deep.nested.module").debug("hierarchy_test")

        record = _parse_log(stream)
        assert record["message"] == "hierarchy_test"
        assert record["logger"] == "ledger_kernel.deep.nested.module"

    def test_reset_keeps_foreign_handlers(self):
        ours, _ = _make_handler()
        foreign = logging.NullHandler()
        root = logging.getLogger("ledger_kernel")
        root.addHandler(foreign)
        try:
            configure_logging(handler=ours)
            reset_logging()
            assert ours not in root.handlers
            assert foreign in root.handlers
        finally:
            root.removeHandler(foreign)
