"""Structured logging for EventDrop.

Every record passes through ``RequestContextFilter``, which copies the
current request and correlation ids onto it; the formatters only read
record attributes.

Usage:
    from eventdrop.observability.logging import configure_logging

    configure_logging(json_format=True, level="INFO")
    logging.getLogger(__name__).info("Accepted 3 uploads for event a1b2c3")
"""

from __future__ import annotations

import contextvars
import logging
import sys
from datetime import datetime, timezone
from typing import Any

import orjson

request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="")
correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default=""
)

# Attributes copied from ``extra={...}`` into JSON lines
EXTRA_FIELDS = ("event_id", "storage_key", "status_code", "duration_ms", "method", "path")

QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "botocore", "aiobotocore")


class RequestContextFilter(logging.Filter):
    """Attach request/correlation ids from context variables to each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "request_id", ""):
            record.request_id = request_id_var.get()
        if not getattr(record, "correlation_id", ""):
            record.correlation_id = correlation_id_var.get()
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line.

    {"timestamp": "...", "level": "INFO", "logger": "eventdrop.services.upload",
     "message": "...", "request_id": "...", "event_id": "a1b2c3"}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in ("request_id", "correlation_id", *EXTRA_FIELDS):
            value = getattr(record, key, None)
            if value not in (None, ""):
                entry[key] = value

        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        return orjson.dumps(entry, default=str).decode()


class ConsoleFormatter(logging.Formatter):
    """Readable single-line output for development.

    12:34:56 INFO     eventdrop.services.upload  Accepted 3 uploads  [req=3f2a9c1d]
    """

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__(datefmt="%H:%M:%S")
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        level = f"{record.levelname:<8}"
        if self.use_colors:
            level = f"{self.LEVEL_COLORS.get(record.levelno, '')}{level}{self.RESET}"

        line = f"{self.formatTime(record, self.datefmt)} {level} {record.name}  {record.getMessage()}"
        request_id = getattr(record, "request_id", "")
        if request_id:
            line += f"  [req={request_id[:8]}]"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(
    json_format: bool = True,
    level: str = "INFO",
    use_colors: bool = True,
) -> None:
    """Install a single stderr handler on the root logger.

    Args:
        json_format: JSON lines (production) instead of console output
        level: Root log level name
        use_colors: ANSI colors for console output on a TTY
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.addFilter(RequestContextFilter())
    handler.setFormatter(JsonFormatter() if json_format else ConsoleFormatter(use_colors))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper())

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
