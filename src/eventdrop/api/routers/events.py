"""Guest-facing endpoints: create an event, look it up, upload media."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from eventdrop.api.deps import MediaServiceDep, base_url
from eventdrop.api.links import admin_url, join_url
from eventdrop.api.schemas import (
    CreateEventRequest,
    CreateEventResponse,
    PublicEvent,
    UploadResponse,
)
from eventdrop.config import settings
from eventdrop.errors import ValidationError
from eventdrop.services.upload import IncomingFile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Events"])


@router.post(
    "/events",
    status_code=status.HTTP_201_CREATED,
    response_model=CreateEventResponse,
    response_model_by_alias=True,
)
async def create_event(
    body: CreateEventRequest,
    service: MediaServiceDep,
    root: Annotated[str, Depends(base_url)],
) -> CreateEventResponse:
    """Create an event and return its guest and admin links."""
    if not body.event_name.strip():
        raise ValidationError("Event name is required")

    event = await service.create_event(body.event_name, body.event_date, body.owner_name)
    return CreateEventResponse(
        event_id=event.id,
        join_url=join_url(root, event.id),
        admin_url=admin_url(root, event),
    )


@router.get("/e/{event_id}", response_model=PublicEvent, response_model_by_alias=True)
async def get_event(event_id: str, service: MediaServiceDep) -> PublicEvent:
    """Public information guests need before uploading."""
    event = await service.get_event(event_id)
    return PublicEvent.from_event(
        event,
        max_file_size_mb=settings.max_file_size_mb,
        max_files=settings.max_files_per_request,
    )


@router.post(
    "/e/{event_id}/upload",
    status_code=status.HTTP_201_CREATED,
    response_model=UploadResponse,
    response_model_by_alias=True,
)
async def upload(
    event_id: str,
    service: MediaServiceDep,
    files: Annotated[list[UploadFile] | None, File()] = None,
    guest_name: Annotated[str, Form(alias="guestName")] = "",
) -> UploadResponse:
    """Accept a batch of photos/videos for an event."""
    incoming: list[IncomingFile] = []
    for upload_file in files or []:
        try:
            payload = await upload_file.read()
        finally:
            await upload_file.close()
        incoming.append(
            IncomingFile(
                payload=payload,
                content_type=upload_file.content_type or "application/octet-stream",
                original_name=upload_file.filename or "",
                size=upload_file.size if upload_file.size is not None else len(payload),
            )
        )

    result = await service.ingest(event_id, guest_name, incoming)
    return UploadResponse(uploaded_count=result.accepted_count)
