import json
import logging
import sys

from shared.logging_config import JsonFormatter, ServiceFilter, setup_logging


def make_record(msg="Created product 1", level=logging.INFO, **extra):
    record = logging.LogRecord(
        name="store_service.product_repository",
        level=level,
        pathname="",
        lineno=0,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_emits_json_with_context():
    record = make_record(collection="products")
    ServiceFilter("store-service").filter(record)

    data = json.loads(JsonFormatter("UTC").format(record))

    assert data["level"] == "INFO"
    assert data["logger"] == "store_service.product_repository"
    assert data["message"] == "Created product 1"
    assert data["service_name"] == "store-service"
    assert data["collection"] == "products"
    assert data["timestamp"].endswith("+00:00")


def test_formatter_includes_exception():
    try:
        raise ValueError("boom")
    except ValueError:
        record = make_record("failed", logging.ERROR)
        record.exc_info = sys.exc_info()

    data = json.loads(JsonFormatter().format(record))

    assert "ValueError: boom" in data["exception"]


def test_setup_logging_does_not_stack_handlers():
    root = logging.getLogger()
    before = list(root.handlers)
    try:
        setup_logging("store-service", level="DEBUG")
        setup_logging("store-service", level="DEBUG")

        json_handlers = [h for h in root.handlers if isinstance(h.formatter, JsonFormatter)]
        assert len(json_handlers) == 1
        assert root.level == logging.DEBUG
    finally:
        for handler in list(root.handlers):
            if handler not in before:
                root.removeHandler(handler)
