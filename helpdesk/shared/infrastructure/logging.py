"""
Structured Logging
==================

JSON logs for the helpdesk core.

Every record carries the service name, environment and, while a
lifecycle operation is running, the operation name bound by
``operation_context``. Secrets that end up in ``extra`` are masked.

Usage:
    from helpdesk.shared.infrastructure.logging import get_logger

    logger = get_logger(__name__)
    logger.info("Ticket assigned", extra={"ticket_id": "TKT-00001"})
"""

import logging
import sys
import time
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Iterator, Optional

from pythonjsonlogger.json import JsonFormatter

_current_operation: ContextVar[Optional[str]] = ContextVar("helpdesk_operation", default=None)

_SENSITIVE_MARKERS = ("password", "secret", "token", "api_key", "webhook_url")
_MASK = "***"

# Libraries that are chatty at INFO
_QUIET_LOGGERS = ("sqlalchemy.engine", "apscheduler", "httpx", "aiosqlite", "asyncio")


class HelpdeskJsonFormatter(JsonFormatter):
    """JSON formatter adding service metadata and masking secrets."""

    def __init__(self, *args: Any, service: str = "helpdesk-core", environment: str = "development", **kwargs: Any):
        super().__init__(*args, **kwargs)
        self._service = service
        self._environment = environment

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record.setdefault("timestamp", datetime.fromtimestamp(record.created, timezone.utc).isoformat())
        log_record["level"] = record.levelname
        log_record["service"] = self._service
        log_record["environment"] = self._environment

        operation = getattr(record, "operation", None) or _current_operation.get()
        if operation:
            log_record["operation"] = operation

        for key in list(log_record):
            if any(marker in key.lower() for marker in _SENSITIVE_MARKERS):
                log_record[key] = _MASK


def setup_logging(
    level: str = "INFO",
    environment: str = "development",
    service: str = "helpdesk-core",
) -> None:
    """
    Route all logging to stdout as JSON.

    Replaces any handlers already on the root logger, so calling it twice
    does not duplicate output.
    """
    numeric_level = logging.getLevelName(level.upper())

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(HelpdeskJsonFormatter(
        fmt="%(name)s %(levelname)s %(message)s",
        service=service,
        environment=environment,
    ))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(numeric_level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


@contextmanager
def operation_context(operation: str) -> Iterator[None]:
    """Tag every record logged inside the block with ``operation``."""
    token = _current_operation.set(operation)
    try:
        yield
    finally:
        _current_operation.reset(token)


@contextmanager
def log_latency(
    logger: logging.Logger,
    operation: str,
    slow_ms: Optional[float] = None,
    **extra_context: Any,
) -> Iterator[None]:
    """
    Time a block and log how long it took.

    Usage:
        with log_latency(logger, "dashboard_analytics", tickets=120):
            report = calculator.dashboard(...)

    Logs at WARNING instead of INFO when ``slow_ms`` is given and
    exceeded. A block that raises is logged with ``outcome="error"`` and
    the exception propagates.
    """
    start = time.perf_counter()
    outcome = "ok"
    try:
        yield
    except Exception:
        outcome = "error"
        raise
    finally:
        latency_ms = round((time.perf_counter() - start) * 1000, 2)
        level = logging.INFO
        if slow_ms is not None and latency_ms > slow_ms:
            level = logging.WARNING
        logger.log(
            level,
            f"{operation} finished",
            extra={
                "operation": operation,
                "latency_ms": latency_ms,
                "outcome": outcome,
                **extra_context,
            },
        )
