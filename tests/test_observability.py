"""
Tests for structured logging.
"""

import json
import logging

from endor.observability import JSONLogger, RequestLogger, TextLogger, create_logger


class TestJSONLogger:
    """Tests for JSONLogger."""

    def test_emits_json(self, caplog):
        caplog.set_level(logging.INFO, logger="test.json")
        log = JSONLogger(name="test.json", extra_context={"resource": "customers"})

        log.info("Request started", action="create")

        record = json.loads(caplog.records[0].getMessage())
        assert record["message"] == "Request started"
        assert record["level"] == "info"
        assert record["resource"] == "customers"
        assert record["action"] == "create"

    def test_disabled_level_is_skipped(self, caplog):
        caplog.set_level(logging.INFO, logger="test.json")

        JSONLogger(name="test.json").debug("hidden")

        assert caplog.records == []

    def test_with_context_keeps_type(self):
        log = TextLogger(name="test.text").with_context(execution_id="abc")

        assert isinstance(log, TextLogger)
        assert log.extra_context == {"execution_id": "abc"}


class TestTextLogger:
    """Tests for TextLogger."""

    def test_key_value_rendering(self, caplog):
        caplog.set_level(logging.INFO, logger="test.text")

        TextLogger(name="test.text").warning("Request failed", status_code=400)

        assert caplog.records[0].getMessage() == "Request failed status_code=400"
        assert caplog.records[0].levelno == logging.WARNING


class TestCreateLogger:
    def test_selects_implementation(self):
        assert type(create_logger("TEXT")) is TextLogger
        assert type(create_logger("json")) is JSONLogger
        assert create_logger("JSON", resource="x").extra_context == {"resource": "x"}


class TestRequestLogger:
    """Tests for RequestLogger lifecycle lines."""

    def test_request_lifecycle(self, caplog):
        caplog.set_level(logging.DEBUG, logger="endor.actions")
        log = RequestLogger.for_request(execution_id="abc", resource="customers", action="create")

        log.request_started()
        log.bind_session("s1", "u1")
        log.stage_completed("validating", 1.234, "authorizing")
        log.request_completed(200, 10.0)

        records = [json.loads(r.getMessage()) for r in caplog.records if r.name == "endor.actions"]
        assert [r["message"] for r in records] == ["Request started", "Stage completed", "Request completed"]
        assert "session_id" not in records[0]
        assert records[1]["session_id"] == "s1"
        assert records[1]["duration_ms"] == 1.23
        assert records[2]["status_code"] == 200

    def test_server_errors_log_at_error(self, caplog):
        caplog.set_level(logging.DEBUG, logger="endor.actions")
        log = RequestLogger.for_request(execution_id="abc", resource="customers", action="create")

        log.request_failed(500, ["boom"], 1.0)
        log.request_failed(404, ["missing"], 1.0)

        levels = [r.levelno for r in caplog.records if r.name == "endor.actions"]
        assert levels == [logging.ERROR, logging.WARNING]
