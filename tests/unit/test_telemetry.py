"""Tests for telemetry module."""

import io
import json
import logging

import pytest

from responses_lib.telemetry import (
    JsonFormatter,
    LogContext,
    LogLevel,
    ResponsesLogger,
    SensitiveDataMasker,
    TextFormatter,
    bind_log_context,
    clear_log_context,
    get_log_context,
    get_logger,
    set_log_context,
)


def _record(msg: str, **fields: object) -> logging.LogRecord:
    record = logging.LogRecord("responses_lib.test", logging.INFO, __file__, 1, msg, None, None)
    if fields:
        record.fields = fields
    return record


class TestLogContext:
    """Tests for LogContext."""

    def test_empty_context(self) -> None:
        assert LogContext().to_dict() == {}

    def test_round_trip_through_context_var(self) -> None:
        set_log_context(LogContext(request_id="req_1", model="o3", extra={"attempt": 2}))
        try:
            ctx = get_log_context()
            assert ctx.request_id == "req_1"
            assert ctx.model == "o3"
            assert ctx.extra == {"attempt": 2}
        finally:
            clear_log_context()
        assert get_log_context().to_dict() == {}

    def test_bind_is_scoped(self) -> None:
        with bind_log_context(model="gpt-4o", attempt=1):
            with bind_log_context(attempt=2, request_id="req_2"):
                assert get_log_context().to_dict() == {
                    "request_id": "req_2",
                    "model": "gpt-4o",
                    "attempt": 2,
                }
            assert get_log_context().to_dict() == {"model": "gpt-4o", "attempt": 1}
        assert get_log_context().to_dict() == {}

    def test_bound_fields_reach_formatter(self) -> None:
        with bind_log_context(operation="create"):
            line = TextFormatter().format(_record("Sending"))
        assert line.endswith("operation=create")


class TestSensitiveDataMasker:
    """Tests for SensitiveDataMasker."""

    def test_mask_api_key(self) -> None:
        masked = SensitiveDataMasker().mask("Using key sk-1234567890abcdefghijklmnop")
        assert "sk-1234567890" not in masked
        assert "REDACTED" in masked

    def test_mask_bearer_token(self) -> None:
        masked = SensitiveDataMasker().mask("Authorization: Bearer secret-token-123")
        assert "secret-token-123" not in masked

    def test_mask_dict(self) -> None:
        masked = SensitiveDataMasker().mask_dict(
            {"api_key": "sk-x", "nested": {"token": "t"}, "attempt": 1}
        )
        assert masked == {
            "api_key": "***REDACTED***",
            "nested": {"token": "***REDACTED***"},
            "attempt": 1,
        }


class TestFormatters:
    """Tests for JSON and text formatters."""

    def test_json_formatter(self) -> None:
        line = JsonFormatter().format(_record("Retrying", attempt=1, api_key="sk-secret"))
        data = json.loads(line)
        assert data["message"] == "Retrying"
        assert data["level"] == "INFO"
        assert data["attempt"] == 1
        assert data["api_key"] == "***REDACTED***"

    def test_text_formatter_appends_fields(self) -> None:
        line = TextFormatter().format(_record("Retrying", error_class="rate_limited"))
        assert "Retrying" in line
        assert line.endswith("error_class=rate_limited")


class TestResponsesLogger:
    """Tests for the logger wrapper."""

    def test_configure_writes_json(self) -> None:
        stream = io.StringIO()
        logger = get_logger("responses_lib.test.json")
        ResponsesLogger.configure(level=LogLevel.DEBUG, format="json", stream=stream)
        try:
            logger.warning("Recovery gave up", attempts=2)
        finally:
            ResponsesLogger.configure(level=LogLevel.INFO, format="text")
        data = json.loads(stream.getvalue().strip())
        assert data["message"] == "Recovery gave up"
        assert data["attempts"] == 2

    def test_level_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RESPONSES_LOG_LEVEL", "error")
        stream = io.StringIO()
        ResponsesLogger.configure(stream=stream)
        try:
            get_logger("responses_lib.test.level").info("hidden")
        finally:
            monkeypatch.delenv("RESPONSES_LOG_LEVEL")
            ResponsesLogger.configure(level=LogLevel.INFO, format="text")
        assert stream.getvalue() == ""
