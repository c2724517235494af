"""FastAPI application factory for EventDrop.

Routes: guest event lookup and upload under ``/api``, organizer gallery
under ``/api/admin``, archive download and file view under ``/admin``.
The storage backend and metadata store are process-wide and are opened
and closed by the lifespan.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from starlette.types import ExceptionHandler

from eventdrop.api.errors import (
    eventdrop_exception_handler,
    generic_exception_handler,
    request_validation_exception_handler,
)
from eventdrop.api.middleware import CorrelationMiddleware
from eventdrop.api.routers import admin, events, health
from eventdrop.config import settings
from eventdrop.errors import EventDropError
from eventdrop.observability import configure_logging
from eventdrop.persistence.factory import close_metadata_store, get_metadata_store
from eventdrop.storage.factory import close_storage, get_storage

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Configure logging, pick the storage backend and prepare the metadata store."""
    configure_logging(
        json_format=settings.env != "dev",
        level=settings.log_level,
    )

    storage = get_storage()
    logger.info(f"Starting EventDrop ({settings.env}, storage={storage.name})")
    await get_metadata_store().init()
    logger.info("EventDrop startup complete")

    yield

    logger.info("Shutting down EventDrop")
    await close_storage()
    await close_metadata_store()
    logger.info("EventDrop shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="EventDrop",
        description="Collect event photos and videos from guests, download them in bulk",
        version="0.1.0",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.add_middleware(CorrelationMiddleware)

    app.add_exception_handler(EventDropError, cast(ExceptionHandler, eventdrop_exception_handler))
    app.add_exception_handler(
        RequestValidationError, cast(ExceptionHandler, request_validation_exception_handler)
    )
    app.add_exception_handler(Exception, cast(ExceptionHandler, generic_exception_handler))

    app.include_router(health.router)
    app.include_router(events.router)
    app.include_router(admin.router)

    return app
