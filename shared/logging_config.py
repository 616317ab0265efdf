"""
logging_config.py - Centralized JSON Logging Configuration

PURPOSE:
    Structured JSON logging for the store service with timezone-aware
    timestamps and the service name injected into every record.

JSON LOG FIELDS:
    - timestamp: ISO 8601 in the configured timezone (e.g., "2026-10-19T16:20:11.501314+00:00")
    - level: Log level (INFO, ERROR, WARNING, DEBUG, CRITICAL)
    - logger: Module name where the log originated (e.g., "store_service.cart_repository")
    - message: The actual log message
    - service_name: Name of the service (injected automatically)
    - collection: Optional collection name the record refers to
    - exception: Full stack trace (only when exc_info is set)

USAGE:
    from shared.logging_config import setup_logging
    setup_logging("store-service", level="INFO")

    logger = logging.getLogger(__name__)
    logger.info("Created product 3")
    logger.warning("Cart 9 not found", extra={"collection": "carts"})

EXAMPLE JSON OUTPUT:
    {
        "timestamp": "2026-10-19T16:20:11.501314+00:00",
        "level": "INFO",
        "logger": "store_service.cart_repository",
        "message": "Added product 1 to cart 1 (quantity now 4)",
        "service_name": "store-service",
        "collection": "carts"
    }
"""

import json
import logging
import sys
from datetime import datetime
from typing import Any, Dict
from zoneinfo import ZoneInfo


class JsonFormatter(logging.Formatter):
    """Formatter that renders each record as one JSON object."""

    def __init__(self, tz: str = "UTC"):
        super().__init__()
        self.tz = ZoneInfo(tz)

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(self.tz).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, "service_name"):
            log_data["service_name"] = record.service_name
        if hasattr(record, "collection"):
            log_data["collection"] = record.collection

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


class ServiceFilter(logging.Filter):
    """Stamps the service name on every record passing through."""

    def __init__(self, service_name: str):
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service_name = self.service_name
        return True


def setup_logging(service_name: str, level: str = "INFO", tz: str = "UTC") -> None:
    """Setup JSON logging for a service.

    Calling it again replaces the handler installed by a previous call
    instead of stacking a second one.
    """
    logger = logging.getLogger()
    logger.setLevel(level)

    for existing in list(logger.handlers):
        if isinstance(existing.formatter, JsonFormatter):
            logger.removeHandler(existing)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter(tz))
    # Filter on the handler so records from child loggers are stamped too
    handler.addFilter(ServiceFilter(service_name))
    logger.addHandler(handler)
