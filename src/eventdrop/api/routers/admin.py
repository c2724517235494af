"""Organizer endpoints: gallery, bulk download, single-file view.

Every endpoint requires the event's admin secret as ``?token=``.
"""

from __future__ import annotations

import logging
from typing import Annotated
from urllib.parse import quote

from fastapi import APIRouter, Depends
from starlette.responses import StreamingResponse

from eventdrop.api.deps import AdminEventDep, MediaServiceDep, base_url
from eventdrop.api.links import download_url, join_url
from eventdrop.api.schemas import AdminEventView, GalleryUpload
from eventdrop.services.naming import sanitize_archive_name

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Admin"])


@router.get("/api/admin/{event_id}", response_model=AdminEventView, response_model_by_alias=True)
async def admin_view(
    event: AdminEventDep,
    service: MediaServiceDep,
    root: Annotated[str, Depends(base_url)],
) -> AdminEventView:
    """Event details and all uploads (newest first) with view links."""
    items = await service.gallery(event)
    return AdminEventView(
        id=event.id,
        event_name=event.name,
        event_date=event.date,
        owner_name=event.owner_name,
        join_url=join_url(root, event.id),
        download_url=download_url(root, event),
        uploads=[GalleryUpload.from_item(item) for item in items],
    )


@router.get("/admin/{event_id}/download.zip", response_class=StreamingResponse)
async def download_archive(event: AdminEventDep, service: MediaServiceDep) -> StreamingResponse:
    """Stream every upload of the event as one ZIP archive.

    The status line is sent before the first entry is read; a storage
    failure after that point aborts the connection and leaves a truncated
    archive.
    """
    download = await service.export_archive(event.id)
    return StreamingResponse(
        download.chunks,
        media_type=download.media_type,
        headers={"Content-Disposition": download.content_disposition},
    )


@router.get("/admin/file/{event_id}/{file_name}", response_class=StreamingResponse)
async def view_file(
    file_name: str,
    event: AdminEventDep,
    service: MediaServiceDep,
) -> StreamingResponse:
    """Stream one stored object of the event."""
    record, stream = await service.open_file(event, file_name)
    media_type = record.content_type if record else "application/octet-stream"
    display_name = sanitize_archive_name(record.original_name if record else file_name)
    return StreamingResponse(
        stream,
        media_type=media_type,
        headers={"Content-Disposition": f"inline; filename*=UTF-8''{quote(display_name)}"},
    )
