"""
Unit tests for logging configuration.

Usage:
    pytest amorce/tests/unit/infrastructure/test_logger.py
"""

import io
import json
import logging
import sys

import pytest

from amorce.infrastructure.monitoring.logger import (
    NOISY_LOGGERS,
    JSONFormatter,
    get_request_id,
    request_id_ctx,
    set_request_id,
    setup_logging,
)


@pytest.fixture
def restore_logging():
    """Restore root logger state changed by setup_logging."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    noisy_levels = {name: logging.getLogger(name).level for name in NOISY_LOGGERS}
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
    for name, noisy_level in noisy_levels.items():
        logging.getLogger(name).setLevel(noisy_level)


def make_record(message: str, exc_info=None) -> logging.LogRecord:
    return logging.LogRecord(
        name="amorce.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=exc_info,
    )


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_schema(self):
        """Test the base fields are present."""
        token = request_id_ctx.set(None)
        try:
            data = json.loads(JSONFormatter().format(make_record("hello")))
        finally:
            request_id_ctx.reset(token)

        assert data["level"] == "WARNING"
        assert data["logger"] == "amorce.test"
        assert data["message"] == "hello"
        assert "timestamp" in data
        assert "request_id" not in data

    def test_request_id_included(self):
        """Test the context request ID is attached."""
        token = request_id_ctx.set("req-1")
        try:
            data = json.loads(JSONFormatter().format(make_record("hello")))
        finally:
            request_id_ctx.reset(token)

        assert data["request_id"] == "req-1"

    def test_lifecycle_fields_included(self):
        """Test fields passed through extra= become JSON keys."""
        record = make_record("Shutdown signal received (SIGTERM)")
        record.fired_by = "SIGTERM"
        record.endpoint = "127.0.0.1:8080"

        data = json.loads(JSONFormatter().format(record))

        assert data["fired_by"] == "SIGTERM"
        assert data["endpoint"] == "127.0.0.1:8080"
        assert "status" not in data

    def test_request_fields_via_logger(self):
        """Test request fields logged with extra= reach the JSON line."""
        stream = io.StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(JSONFormatter())
        logger = logging.getLogger("amorce.test.fields")
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        try:
            logger.info(
                "finished processing request GET /healthcheck",
                extra={"method": "GET", "path": "/healthcheck", "status": 200},
            )
        finally:
            logger.removeHandler(handler)

        data = json.loads(stream.getvalue())
        assert data["method"] == "GET"
        assert data["path"] == "/healthcheck"
        assert data["status"] == 200

    def test_exception_included(self):
        """Test exception tracebacks are serialized."""
        try:
            raise ValueError("boom")
        except ValueError:
            record = make_record("failed", exc_info=sys.exc_info())

        data = json.loads(JSONFormatter().format(record))

        assert "ValueError: boom" in data["exception"]


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_json_handler(self, restore_logging):
        """Test a single JSON handler at the requested level."""
        setup_logging(level="debug", json_logs=True)

        root = restore_logging
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)

    def test_plain_handler(self, restore_logging):
        """Test plain text formatting outside production."""
        setup_logging(level="INFO", json_logs=False)

        formatter = restore_logging.handlers[0].formatter
        assert not isinstance(formatter, JSONFormatter)

    def test_noisy_loggers_quieted(self, restore_logging):
        """Test third-party loggers are raised to WARNING."""
        setup_logging(level="DEBUG", json_logs=False)

        for name in NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING


class TestRequestId:
    """Tests for request ID helpers."""

    def test_generated_when_missing(self):
        """Test a UUID is generated when none is given."""
        token = request_id_ctx.set(None)
        try:
            request_id = set_request_id()
            assert get_request_id() == request_id
            assert len(request_id) == 36
        finally:
            request_id_ctx.reset(token)

    def test_explicit_value(self):
        """Test an explicit request ID is kept."""
        token = request_id_ctx.set(None)
        try:
            assert set_request_id("abc") == "abc"
            assert get_request_id() == "abc"
        finally:
            request_id_ctx.reset(token)
