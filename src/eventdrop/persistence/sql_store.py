"""Relational metadata store (PostgreSQL in production)."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from eventdrop.errors import MetadataCommitError
from eventdrop.models import Event, UploadRecord, utc_now
from eventdrop.persistence.base import MetadataStore, generate_admin_token, generate_event_id
from eventdrop.persistence.db import Database
from eventdrop.persistence.tables import EventTable, UploadTable

logger = logging.getLogger(__name__)

# Attempts at finding an unused short event id before giving up
MAX_EVENT_ID_ATTEMPTS = 10


class SqlMetadataStore(MetadataStore):
    """Metadata store on SQLAlchemy async sessions."""

    def __init__(self, db: Database):
        self.db = db

    async def init(self) -> None:
        await self.db.create_all()

    async def close(self) -> None:
        await self.db.close()

    async def create_event(self, name: str, date: str = "", owner_name: str = "") -> Event:
        for _ in range(MAX_EVENT_ID_ATTEMPTS):
            event = Event(
                id=generate_event_id(),
                name=name,
                date=date,
                owner_name=owner_name,
                admin_token=generate_admin_token(),
                created_at=utc_now(),
            )
            try:
                async with self.db.session() as session:
                    session.add(
                        EventTable(
                            id=event.id,
                            event_name=event.name,
                            event_date=event.date or None,
                            owner_name=event.owner_name or None,
                            admin_token=event.admin_token,
                            created_at=event.created_at,
                        )
                    )
            except IntegrityError:
                logger.debug(f"Event id {event.id} already taken, retrying")
                continue
            logger.info(f"Created event {event.id}")
            return event

        raise RuntimeError("Could not allocate an event id, try again")

    async def find_event(self, event_id: str) -> Event | None:
        async with self.db.session() as session:
            row = await session.get(EventTable, event_id)
            return row.to_model() if row is not None else None

    async def commit_uploads(self, records: Sequence[UploadRecord]) -> None:
        if not records:
            return
        try:
            async with self.db.session() as session:
                session.add_all(
                    [
                        UploadTable.from_model(record, batch_position=position)
                        for position, record in enumerate(records)
                    ]
                )
        except SQLAlchemyError as e:
            raise MetadataCommitError(f"Failed to commit {len(records)} uploads: {e}") from e

    async def list_uploads(self, event_id: str) -> list[UploadRecord]:
        stmt = (
            select(UploadTable)
            .where(UploadTable.event_id == event_id)
            .order_by(UploadTable.uploaded_at.desc(), UploadTable.batch_position)
        )
        async with self.db.session() as session:
            result = await session.execute(stmt)
            return [row.to_model() for row in result.scalars().all()]
