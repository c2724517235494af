"""Request and response bodies of the EventDrop API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from eventdrop.models import Event
from eventdrop.services.media import GalleryItem


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CreateEventRequest(CamelModel):
    event_name: str = Field(default="", alias="eventName")
    event_date: str = Field(default="", alias="eventDate")
    owner_name: str = Field(default="", alias="ownerName")


class CreateEventResponse(CamelModel):
    event_id: str = Field(alias="eventId")
    join_url: str = Field(alias="joinUrl")
    admin_url: str = Field(alias="adminUrl")


class PublicEvent(CamelModel):
    id: str
    event_name: str = Field(alias="eventName")
    event_date: str = Field(alias="eventDate")
    owner_name: str = Field(alias="ownerName")
    max_file_size_mb: int = Field(alias="maxFileSizeMb")
    max_files_per_request: int = Field(alias="maxFilesPerRequest")

    @classmethod
    def from_event(cls, event: Event, max_file_size_mb: int, max_files: int) -> PublicEvent:
        return cls(
            id=event.id,
            event_name=event.name,
            event_date=event.date,
            owner_name=event.owner_name,
            max_file_size_mb=max_file_size_mb,
            max_files_per_request=max_files,
        )


class UploadResponse(CamelModel):
    ok: bool = True
    uploaded_count: int = Field(alias="uploadedCount")


class GalleryUpload(CamelModel):
    id: str
    guest_name: str = Field(alias="guestName")
    original_name: str = Field(alias="originalName")
    storage_path: str = Field(alias="storagePath")
    mime_type: str = Field(alias="mimeType")
    size: int
    uploaded_at: datetime = Field(alias="uploadedAt")
    view_url: str = Field(alias="viewUrl")
    view_url_expires_at: datetime | None = Field(default=None, alias="viewUrlExpiresAt")

    @classmethod
    def from_item(cls, item: GalleryItem) -> GalleryUpload:
        record = item.record
        return cls(
            id=record.id,
            guest_name=record.guest_name,
            original_name=record.original_name,
            storage_path=record.storage_path,
            mime_type=record.content_type,
            size=record.size,
            uploaded_at=record.uploaded_at,
            view_url=item.credential.url,
            view_url_expires_at=item.credential.expires_at,
        )


class AdminEventView(CamelModel):
    id: str
    event_name: str = Field(alias="eventName")
    event_date: str = Field(alias="eventDate")
    owner_name: str = Field(alias="ownerName")
    join_url: str = Field(alias="joinUrl")
    download_url: str = Field(alias="downloadUrl")
    uploads: list[GalleryUpload]
