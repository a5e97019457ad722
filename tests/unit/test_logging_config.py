"""
Unit Tests for logging configuration
"""

import json
import logging

from product_catalog.core.logging_config import (
    JsonFormatter,
    RequestIdFilter,
    get_request_id,
    log_validation,
    set_request_id,
)
from product_catalog.services.product_validator import FieldError


def make_record(message: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord("product_catalog.test", logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestRequestId:
    """Tests for request id propagation"""

    def test_filter_injects_current_request_id(self):
        set_request_id("req_123")
        record = make_record()

        RequestIdFilter().filter(record)

        assert record.request_id == "req_123"
        assert get_request_id() == "req_123"
        set_request_id(None)

    def test_filter_uses_dash_without_request(self):
        set_request_id(None)
        record = make_record()

        RequestIdFilter().filter(record)

        assert record.request_id == "-"


class TestJsonFormatter:
    """Tests for JsonFormatter"""

    def test_extras_are_included(self):
        record = make_record("Product created", product_id="prod_1", request_id="req_9")

        data = json.loads(JsonFormatter().format(record))

        assert data["message"] == "Product created"
        assert data["level"] == "INFO"
        assert data["product_id"] == "prod_1"
        assert data["request_id"] == "req_9"
        assert "msg" not in data


class TestLogValidation:
    """Tests for log_validation()"""

    def test_logs_field_errors(self, caplog):
        logger = logging.getLogger("product_catalog.test")

        with caplog.at_level(logging.WARNING, logger="product_catalog.test"):
            log_validation(logger, "create product", [FieldError("name", "required")])

        assert "Validation failed: create product" in caplog.text
        assert caplog.records[-1].errors == [{"field": "name", "message": "required"}]

    def test_no_errors_no_log(self, caplog):
        with caplog.at_level(logging.WARNING):
            log_validation(logging.getLogger("product_catalog.test"), "update product", [])

        assert caplog.records == []
