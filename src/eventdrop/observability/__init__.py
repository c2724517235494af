"""Observability for EventDrop: structured logging with request correlation."""

from eventdrop.observability.logging import (
    ConsoleFormatter,
    JsonFormatter,
    RequestContextFilter,
    configure_logging,
    correlation_id_var,
    request_id_var,
)

__all__ = [
    "ConsoleFormatter",
    "JsonFormatter",
    "RequestContextFilter",
    "configure_logging",
    "correlation_id_var",
    "request_id_var",
]
