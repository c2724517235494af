"""Error responses for the EventDrop API.

Domain errors carry their own status code; this module renders them as a
small JSON body:

    {"error": "Event with identifier 'abc123' not found", "code": "NotFound", ...}
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from pydantic import BaseModel

from eventdrop.errors import EventDropError

logger = logging.getLogger(__name__)


class ErrorBody(BaseModel):
    """JSON body of every error response."""

    model_config = {"extra": "forbid"}

    error: str
    code: str
    timestamp: str


def _error_response(status_code: int, code: str, text: str) -> ORJSONResponse:
    body = ErrorBody(error=text, code=code, timestamp=datetime.now(UTC).isoformat())
    return ORJSONResponse(status_code=status_code, content=body.model_dump())


async def eventdrop_exception_handler(request: Request, exc: EventDropError) -> ORJSONResponse:
    """Exception handler for domain errors."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.text}")
    return _error_response(exc.status_code, exc.code, exc.text)


async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> ORJSONResponse:
    """Malformed requests (missing form fields, wrong types) are plain 400s."""
    fields = ", ".join(".".join(str(part) for part in err["loc"]) for err in exc.errors())
    return _error_response(400, "BadRequest", f"Invalid request: {fields}")


async def generic_exception_handler(request: Request, exc: Exception) -> ORJSONResponse:
    """Exception handler for unexpected errors."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return _error_response(500, "InternalServerError", "An unexpected error occurred")
