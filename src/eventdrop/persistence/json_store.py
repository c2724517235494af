"""Single-document JSON metadata store.

All events and uploads live in one document:
    {"events": [...], "uploads": [...]}

Every mutation is a read-modify-write of the whole document. Those cycles
run behind an asyncio.Lock so concurrent requests in the same process never
lose each other's updates, and the new document replaces the old one
atomically.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any
from uuid import uuid4

import aiofiles  # type: ignore[import-untyped]
import aiofiles.os  # type: ignore[import-untyped]
import orjson

from eventdrop.errors import MetadataCommitError
from eventdrop.models import Event, UploadRecord, utc_now
from eventdrop.persistence.base import MetadataStore, generate_admin_token, generate_event_id

logger = logging.getLogger(__name__)

Document = dict[str, list[dict[str, Any]]]


def _empty_document() -> Document:
    return {"events": [], "uploads": []}


class JsonMetadataStore(MetadataStore):
    """Metadata store backed by a local JSON file."""

    def __init__(self, path: str | Path = "data/db.json"):
        self.path = Path(path)
        self._lock = asyncio.Lock()

    async def init(self) -> None:
        async with self._lock:
            await aiofiles.os.makedirs(self.path.parent, exist_ok=True)
            if not await aiofiles.os.path.exists(self.path):
                await self._write(_empty_document())

    async def _read(self) -> Document:
        try:
            async with aiofiles.open(self.path, "rb") as f:
                doc = orjson.loads(await f.read())
            if not isinstance(doc.get("events"), list) or not isinstance(doc.get("uploads"), list):
                raise ValueError("missing events/uploads arrays")
            return doc
        except FileNotFoundError:
            return _empty_document()
        except (orjson.JSONDecodeError, ValueError, AttributeError) as e:
            logger.warning(f"Metadata document {self.path} is corrupt, resetting: {e}")
            doc = _empty_document()
            await self._write(doc)
            return doc

    async def _write(self, doc: Document) -> None:
        tmp_path = self.path.with_name(f".{self.path.name}.{uuid4().hex}.tmp")
        async with aiofiles.open(tmp_path, "wb") as f:
            await f.write(orjson.dumps(doc, option=orjson.OPT_INDENT_2))
        await aiofiles.os.replace(tmp_path, self.path)

    async def create_event(self, name: str, date: str = "", owner_name: str = "") -> Event:
        async with self._lock:
            doc = await self._read()
            taken = {item["id"] for item in doc["events"]}
            event_id = generate_event_id()
            while event_id in taken:
                event_id = generate_event_id()

            event = Event(
                id=event_id,
                name=name,
                date=date,
                owner_name=owner_name,
                admin_token=generate_admin_token(),
                created_at=utc_now(),
            )
            doc["events"].append(event.to_dict())
            await self._write(doc)

        logger.info(f"Created event {event.id}")
        return event

    async def find_event(self, event_id: str) -> Event | None:
        async with self._lock:
            doc = await self._read()
        for item in doc["events"]:
            if item.get("id") == event_id:
                return Event.from_dict(item)
        return None

    async def commit_uploads(self, records: Sequence[UploadRecord]) -> None:
        if not records:
            return
        try:
            async with self._lock:
                doc = await self._read()
                doc["uploads"].extend(record.to_dict() for record in records)
                await self._write(doc)
        except OSError as e:
            raise MetadataCommitError(f"Failed to commit {len(records)} uploads: {e}") from e

    async def list_uploads(self, event_id: str) -> list[UploadRecord]:
        async with self._lock:
            doc = await self._read()
        records = [
            UploadRecord.from_dict(item) for item in doc["uploads"] if item.get("event_id") == event_id
        ]
        # Stable sort: a batch sharing one uploaded_at keeps its commit order
        records.sort(key=lambda record: record.uploaded_at, reverse=True)
        return records
