"""Shared FastAPI dependencies for EventDrop routers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Query, Request

from eventdrop.config import settings
from eventdrop.models import Event
from eventdrop.services.factory import get_media_service
from eventdrop.services.media import MediaService

MediaServiceDep = Annotated[MediaService, Depends(get_media_service)]


async def admin_event(
    event_id: str,
    service: MediaServiceDep,
    token: Annotated[str, Query(description="Admin secret of the event")] = "",
) -> Event:
    """FastAPI dependency resolving an event the caller administers.

    Raises:
        EventNotFoundError: Unknown event (404)
        AuthorizationError: Wrong or missing token (403)
    """
    return await service.authorize(event_id, token)


AdminEventDep = Annotated[Event, Depends(admin_event)]


def base_url(request: Request) -> str:
    """Public base URL for links handed to guests and organizers."""
    if settings.base_url:
        return settings.base_url.rstrip("/")
    return str(request.base_url).rstrip("/")
