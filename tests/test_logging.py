"""Tests for the structured logging system (bursar_kernel/logging_config.py)."""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO

import pytest

from bursar_kernel.domain.values import AccountCategory
from bursar_kernel.exceptions import AccountNotFoundError
from bursar_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests, then restore the suite setup."""
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


def _parse_all_logs(stream: StringIO) -> list[dict]:
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


def _parse_log(stream: StringIO) -> dict:
    return _parse_all_logs(stream)[0]


# ---------------------------------------------------------------------------
# StructuredFormatter tests
# ---------------------------------------------------------------------------


class TestStructuredFormatter:

    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("hello")

        record = _parse_log(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "bursar_kernel.test"
        assert "ts" in record

    def test_extra_fields_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info(
            "report_generated",
            extra={
                "total": Decimal("1000.50"),
                "as_of": date(2024, 3, 31),
                "category": AccountCategory.ASSET,
            },
        )

        record = _parse_log(stream)
        assert record["total"] == "1000.50"
        assert record["as_of"] == "2024-03-31"
        assert record["category"] == "asset"

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        LogContext.set(tenant_id="school-001", report_id="r-1")
        get_logger("test").info("test_msg")

        record = _parse_log(stream)
        assert record["tenant_id"] == "school-001"
        assert record["report_id"] == "r-1"

    def test_no_context_fields_when_empty(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("bare_message")

        record = _parse_log(stream)
        assert "tenant_id" not in record
        assert "report_id" not in record

    def test_kernel_exception_fields_extracted(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        try:
            raise AccountNotFoundError("acct-9", "school-001")
        except AccountNotFoundError:
            get_logger("test").error("lookup_failed", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_type"] == "AccountNotFoundError"
        assert record["exc_code"] == "ACCOUNT_NOT_FOUND"
        assert record["exc_account_id"] == "acct-9"
        assert record["exc_tenant_id"] == "school-001"
        assert "traceback" in record

    def test_debug_suppressed_at_info(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("first")
        logger.warning("second", extra={"k": "v"})
        logger.debug("third")

        logs = _parse_all_logs(stream)
        assert [r["message"] for r in logs] == ["first", "second"]


# ---------------------------------------------------------------------------
# LogContext tests
# ---------------------------------------------------------------------------


class TestLogContext:

    def test_set_and_clear(self):
        LogContext.set(tenant_id="t", report_id="r")
        assert LogContext.get_all() == {"tenant_id": "t", "report_id": "r"}
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_set_none_keeps_value(self):
        LogContext.set(tenant_id="t")
        LogContext.set(report_id="r")
        assert LogContext.get_all() == {"tenant_id": "t", "report_id": "r"}

    def test_bind_restores_previous(self):
        LogContext.set(tenant_id="outer")
        with LogContext.bind(tenant_id="inner", report_id="r"):
            assert LogContext.get_all() == {"tenant_id": "inner", "report_id": "r"}
        assert LogContext.get_all() == {"tenant_id": "outer"}

    def test_bind_ignores_none(self):
        LogContext.set(tenant_id="outer")
        with LogContext.bind(tenant_id=None, report_id="r-2"):
            assert LogContext.get_all() == {"tenant_id": "outer", "report_id": "r-2"}

    def test_bind_restores_after_exception(self):
        with pytest.raises(RuntimeError):
            with LogContext.bind(tenant_id="school-001"):
                raise RuntimeError("boom")
        assert LogContext.get_all() == {}

    def test_bind_rejects_unknown_field(self):
        with pytest.raises(TypeError):
            with LogContext.bind(student_id="s1"):
                pass


# ---------------------------------------------------------------------------
# configure_logging tests
# ---------------------------------------------------------------------------


class TestConfigureLogging:

    def test_idempotent(self):
        h1, _ = _make_handler()
        configure_logging(handler=h1)
        h2, _ = _make_handler()
        configure_logging(handler=h2)

        handlers = logging.getLogger("bursar_kernel").handlers
        assert h1 in handlers
        assert h2 not in handlers

    def test_reset_keeps_foreign_handlers(self):
        foreign = logging.NullHandler()
        namespace_logger = logging.getLogger("bursar_kernel")
        namespace_logger.addHandler(foreign)
        try:
            h1, _ = _make_handler()
            configure_logging(handler=h1)
            reset_logging()

            assert h1 not in namespace_logger.handlers
            assert foreign in namespace_logger.handlers
        finally:
            namespace_logger.removeHandler(foreign)

    def test_logger_hierarchy(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler, level=logging.DEBUG)
        get_logger("modules.reporting.statements").debug("hierarchy_test")

        record = _parse_log(stream)
        assert record["logger"] == "bursar_kernel.modules.reporting.statements"
