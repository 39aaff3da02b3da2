"""
Tests for the JSON log formatter and latency helper.
"""

import io
import json
import logging
import sys

import pytest

from helpdesk.shared.infrastructure.logging import (
    HelpdeskJsonFormatter,
    log_latency,
    operation_context,
)


@pytest.fixture
def captured():
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(HelpdeskJsonFormatter("%(name)s %(levelname)s %(message)s", environment="staging"))
    logger = logging.getLogger("tests.logging")
    logger.handlers = [handler]
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    def records():
        return [json.loads(line) for line in stream.getvalue().splitlines()]

    yield logger, records
    logger.handlers = []


class TestFormatter:

    def test_adds_service_fields_and_operation(self, captured):
        logger, records = captured

        with operation_context("reassign"):
            logger.info("Ticket reassigned", extra={"ticket_id": "TKT-00001"})
        logger.info("Outside")

        inside, outside = records()
        assert inside["message"] == "Ticket reassigned"
        assert inside["ticket_id"] == "TKT-00001"
        assert inside["operation"] == "reassign"
        assert inside["environment"] == "staging"
        assert inside["service"] == "helpdesk-core"
        assert "operation" not in outside

    def test_masks_secrets(self, captured):
        logger, records = captured

        logger.warning("Config loaded", extra={"webhook_url": "https://hooks/abc", "api_key": "k"})

        [record] = records()
        assert record["webhook_url"] == "***"
        assert record["api_key"] == "***"


class TestLogLatency:

    def test_slow_block_logs_warning(self, captured):
        logger, records = captured

        with log_latency(logger, "dashboard_analytics", slow_ms=-1, tickets=3):
            pass

        [record] = records()
        assert record["levelname"] == "WARNING"
        assert record["outcome"] == "ok"
        assert record["tickets"] == 3

    def test_error_is_logged_and_propagates(self, captured):
        logger, records = captured

        with pytest.raises(RuntimeError):
            with log_latency(logger, "create_ticket"):
                raise RuntimeError("boom")

        assert records()[0]["outcome"] == "error"


class TestJsonBackend:

    def test_formatter_avoids_deprecated_jsonlogger_module(self):
        import helpdesk.main  # noqa: F401

        assert "pythonjsonlogger.jsonlogger" not in sys.modules
        assert HelpdeskJsonFormatter.__mro__[1].__module__ == "pythonjsonlogger.json"
