"""SQLAlchemy ORM models for event metadata.

Mirrors the hosted schema: uploads reference their event and cascade on
event deletion; uploads are listed per event newest first.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from eventdrop.models import Event, UploadRecord


def _aware(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class EventTable(Base):
    """Events table."""

    __tablename__ = "events"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    event_name: Mapped[str] = mapped_column(Text, nullable=False)
    event_date: Mapped[str | None] = mapped_column(Text, nullable=True)
    owner_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    admin_token: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    def to_model(self) -> Event:
        return Event(
            id=self.id,
            name=self.event_name,
            date=self.event_date or "",
            owner_name=self.owner_name or "",
            admin_token=self.admin_token,
            created_at=_aware(self.created_at),
        )


class UploadTable(Base):
    """Upload metadata table.

    Binary content lives in the storage backend; storage_path is the
    backend-opaque key.
    """

    __tablename__ = "uploads"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    event_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
    )
    guest_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    original_name: Mapped[str] = mapped_column(Text, nullable=False)
    storage_path: Mapped[str] = mapped_column(Text, nullable=False)
    mime_type: Mapped[str] = mapped_column(String(255), nullable=False)
    size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    # Position within its upload batch; breaks ties on the shared uploaded_at
    batch_position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (Index("uploads_event_id_uploaded_at_idx", "event_id", "uploaded_at"),)

    @classmethod
    def from_model(cls, record: UploadRecord, batch_position: int = 0) -> UploadTable:
        return cls(
            id=record.id,
            event_id=record.event_id,
            guest_name=record.guest_name or None,
            original_name=record.original_name,
            storage_path=record.storage_path,
            mime_type=record.content_type,
            size=record.size,
            uploaded_at=record.uploaded_at,
            batch_position=batch_position,
        )

    def to_model(self) -> UploadRecord:
        return UploadRecord(
            id=self.id,
            event_id=self.event_id,
            guest_name=self.guest_name or "",
            original_name=self.original_name,
            storage_path=self.storage_path,
            content_type=self.mime_type,
            size=self.size,
            uploaded_at=_aware(self.uploaded_at),
        )
