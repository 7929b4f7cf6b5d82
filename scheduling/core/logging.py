# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Structured JSON logging, one line per record on stdout.

The request id of the HTTP request being served is kept in a context
variable (set by RequestIDMiddleware) and stamped on every record, so the
generator's per-date lines can be traced back to the "Generate Now" call
that produced them.
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Optional

from scheduling.core.config import settings

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# Keys callers may pass through ``extra=`` that end up as top-level fields.
CONTEXT_FIELDS = ("template_id", "user_id", "schedule_date", "duration_ms")


class RequestContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get()
        return True


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "service": settings.SERVICE_NAME,
            "logger": record.name,
            "message": record.getMessage(),
        }
        request_id = getattr(record, "request_id", None)
        if request_id:
            payload["request_id"] = request_id
        for key in CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value if isinstance(value, (int, float)) else str(value)
        if record.exc_info and record.exc_info[1]:
            payload["error"] = str(record.exc_info[1])
            payload["error_type"] = type(record.exc_info[1]).__name__
        return json.dumps(payload)


def get_logger(name: str | None = None) -> logging.Logger:
    """Logger writing JSON lines at ``LOG_LEVEL``; configured once per name."""
    logger = logging.getLogger(name or settings.SERVICE_NAME)
    if logger.handlers:
        return logger
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestContextFilter())
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    logger.propagate = False
    return logger
