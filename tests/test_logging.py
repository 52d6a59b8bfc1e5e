"""Tests for the structured logging system (tax_kernel/logging_config.py)."""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO
from uuid import uuid4

from tax_kernel.domain.types import BusinessType
from tax_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
)


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
    """Parse all JSON log lines from a stream."""
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
        assert record["logger"] == "tax_kernel.test"
        assert "ts" in record

    def test_extra_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("calculated", extra={"components_count": 2, "classification_code": "1001"})

        record = _parse_log(stream)
        assert record["components_count"] == 2
        assert record["classification_code"] == "1001"

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        LogContext.set(correlation_id="abc-123", batch_id="batch-9")
        logger.info("test_msg")

        record = _parse_log(stream)
        assert record["correlation_id"] == "abc-123"
        assert record["batch_id"] == "batch-9"

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

    def test_tax_exception_code_extracted(self):
        """Tax engine exceptions carry .code and structured attributes."""
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        from tax_kernel.exceptions import ConfigurationNotFoundError

        try:
            raise ConfigurationNotFoundError("2202", "B2C", "MH", date(2024, 1, 1))
        except ConfigurationNotFoundError:
            logger.error("configuration_error", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_code"] == "CONFIGURATION_NOT_FOUND"
        assert record["exc_type"] == "ConfigurationNotFoundError"
        assert record["exc_classification_code"] == "2202"
        assert record["exc_business_type"] == "B2C"
        assert record["exc_jurisdiction_scope"] == "MH"
        assert record["exc_effective_date"] == "2024-01-01"

    def test_no_context_fields_when_empty(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("bare_message")

        record = _parse_log(stream)
        assert "correlation_id" not in record
        assert "tenant_id" not in record

    def test_domain_values_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        uid = uuid4()
        logger.info("with_values", extra={
            "configuration_id": uid,
            "rate": Decimal("2.5"),
            "business_type": BusinessType.SEZ,
            "effective_date": date(2024, 1, 1),
            "scopes": frozenset({"MH", "KA"}),
        })

        record = _parse_log(stream)
        assert record["configuration_id"] == str(uid)
        assert record["rate"] == "2.5"
        assert record["business_type"] == "SEZ"
        assert record["effective_date"] == "2024-01-01"
        assert record["scopes"] == ["KA", "MH"]

    def test_valid_json_every_line(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("first")
        logger.warning("second", extra={"k": "v"})
        logger.debug("third")

        logs = _parse_all_logs(stream)
        # Default level is INFO: the debug line is dropped
        assert len(logs) == 2
        for record in logs:
            assert "ts" in record
            assert "level" in record
            assert "logger" in record
            assert "message" in record


# ---------------------------------------------------------------------------
# LogContext tests
# ---------------------------------------------------------------------------


class TestLogContext:
    """Tests for context propagation."""

    def test_set_and_get(self):
        LogContext.set(correlation_id="x", tenant_id="t")
        assert LogContext.get_all() == {"correlation_id": "x", "tenant_id": "t"}

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
        """bind() restores to None if there was no previous value."""
        assert "batch_id" not in LogContext.get_all()
        with LogContext.bind(batch_id="temp"):
            assert LogContext.get_all()["batch_id"] == "temp"
        assert "batch_id" not in LogContext.get_all()

    def test_bind_stringifies_and_skips_unknown(self):
        uid = uuid4()
        with LogContext.bind(tenant_id=uid, request_id=None, unknown="x"):
            assert LogContext.get_all() == {"tenant_id": str(uid)}

    def test_all_fields(self):
        LogContext.set(
            correlation_id="c",
            tenant_id="t",
            request_id="r",
            batch_id="b",
        )
        ctx = LogContext.get_all()
        assert len(ctx) == 4
        assert ctx["request_id"] == "r"


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
        root = logging.getLogger("tax_kernel")
        assert len(root.handlers) == 1

    def test_get_logger_returns_child(self):
        logger = get_logger("modules.determination.service")
        assert logger.name == "tax_kernel.modules.determination.service"

    def test_logger_hierarchy(self):
        """Child loggers inherit the tax_kernel root config."""
        handler, stream = _make_handler()
        configure_logging(handler=handler, level=logging.DEBUG)
        child = get_logger("deep.nested.module")
        child.debug("hierarchy_test")

        record = _parse_log(stream)
        assert record["message"] == "hierarchy_test"
        assert record["logger"] == "tax_kernel.deep.nested.module"
