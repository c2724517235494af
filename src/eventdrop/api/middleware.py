"""Request correlation and request logging.

A plain ASGI middleware: it wraps ``send`` instead of buffering the
response, so streamed archives pass through untouched while the ids are
still added to the response headers.
"""

from __future__ import annotations

import logging
import time
import uuid

from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from eventdrop.observability.logging import correlation_id_var, request_id_var

logger = logging.getLogger("eventdrop.access")

REQUEST_ID_HEADER = "x-request-id"
CORRELATION_ID_HEADER = "x-correlation-id"


class CorrelationMiddleware:
    """Assign request/correlation ids and log one line per request.

    Incoming ``x-request-id`` and ``x-correlation-id`` headers are reused
    when present; both are echoed on the response.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = MutableHeaders(scope=scope)
        request_id = headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        correlation_id = headers.get(CORRELATION_ID_HEADER) or request_id

        request_token = request_id_var.set(request_id)
        correlation_token = correlation_id_var.set(correlation_id)
        started = time.perf_counter()
        status_code = 500

        async def send_with_ids(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                response_headers = MutableHeaders(scope=message)
                response_headers[REQUEST_ID_HEADER] = request_id
                response_headers[CORRELATION_ID_HEADER] = correlation_id
            await send(message)

        try:
            await self.app(scope, receive, send_with_ids)
        finally:
            duration_ms = round((time.perf_counter() - started) * 1000, 1)
            logger.info(
                f"{scope['method']} {scope['path']} {status_code} {duration_ms}ms",
                extra={
                    "method": scope["method"],
                    "path": scope["path"],
                    "status_code": status_code,
                    "duration_ms": duration_ms,
                },
            )
            request_id_var.reset(request_token)
            correlation_id_var.reset(correlation_token)
