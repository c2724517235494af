"""Core records shared by storage, persistence and services."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class StorageObjectRef:
    """Backend-opaque handle to one stored payload.

    ``key`` is always ``{event_id}/{file_name}``; for the local backend it is
    a path relative to the uploads directory, for the object store it is the
    bucket key (before any configured prefix).
    """

    event_id: str
    key: str
    content_type: str = "application/octet-stream"

    @property
    def file_name(self) -> str:
        return self.key.rsplit("/", 1)[-1]


@dataclass
class Event:
    """A photo/video collection campaign."""

    id: str
    name: str
    admin_token: str
    date: str = ""
    owner_name: str = ""
    created_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "date": self.date,
            "owner_name": self.owner_name,
            "admin_token": self.admin_token,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Event:
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            admin_token=data["admin_token"],
            date=data.get("date") or "",
            owner_name=data.get("owner_name") or "",
            created_at=datetime.fromisoformat(data["created_at"]),
        )


@dataclass
class UploadRecord:
    """Metadata describing one guest-submitted binary object."""

    event_id: str
    original_name: str
    storage_path: str
    content_type: str
    size: int
    guest_name: str = ""
    id: str = field(default_factory=lambda: str(uuid4()))
    uploaded_at: datetime = field(default_factory=utc_now)

    @property
    def ref(self) -> StorageObjectRef:
        return StorageObjectRef(
            event_id=self.event_id,
            key=self.storage_path,
            content_type=self.content_type,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "event_id": self.event_id,
            "guest_name": self.guest_name,
            "original_name": self.original_name,
            "storage_path": self.storage_path,
            "content_type": self.content_type,
            "size": self.size,
            "uploaded_at": self.uploaded_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UploadRecord:
        return cls(
            id=data["id"],
            event_id=data["event_id"],
            guest_name=data.get("guest_name") or "",
            original_name=data.get("original_name") or "",
            storage_path=data["storage_path"],
            content_type=data.get("content_type") or "application/octet-stream",
            size=int(data.get("size") or 0),
            uploaded_at=datetime.fromisoformat(data["uploaded_at"]),
        )
