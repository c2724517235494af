"""Tests for the single-document JSON metadata store."""

from __future__ import annotations

import asyncio
from datetime import timedelta

import orjson
import pytest

from eventdrop.models import UploadRecord, utc_now
from eventdrop.persistence.json_store import JsonMetadataStore


def _record(event_id: str, name: str, age_seconds: int = 0) -> UploadRecord:
    return UploadRecord(
        event_id=event_id,
        original_name=name,
        storage_path=f"{event_id}/1700000000000-{name}",
        content_type="image/jpeg",
        size=3,
        guest_name="Ali",
        uploaded_at=utc_now() - timedelta(seconds=age_seconds),
    )


@pytest.mark.asyncio
async def test_init_creates_empty_document(json_store: JsonMetadataStore) -> None:
    await json_store.init()
    await json_store.init()

    assert orjson.loads(json_store.path.read_bytes()) == {"events": [], "uploads": []}


@pytest.mark.asyncio
async def test_create_and_find_event(json_store: JsonMetadataStore) -> None:
    await json_store.init()

    event = await json_store.create_event("Graduation", date="2024-06-01", owner_name="Elif")
    found = await json_store.find_event(event.id)

    assert len(event.id) == 6
    assert len(event.admin_token) == 32
    assert found is not None
    assert found.name == "Graduation"
    assert found.date == "2024-06-01"
    assert found.owner_name == "Elif"
    assert found.admin_token == event.admin_token
    assert found.created_at == event.created_at


@pytest.mark.asyncio
async def test_find_unknown_event(json_store: JsonMetadataStore) -> None:
    await json_store.init()
    assert await json_store.find_event("ffffff") is None


@pytest.mark.asyncio
async def test_event_ids_are_unique(json_store: JsonMetadataStore) -> None:
    events = [await json_store.create_event(f"Event {i}") for i in range(20)]
    assert len({event.id for event in events}) == 20


@pytest.mark.asyncio
async def test_list_uploads_newest_first(json_store: JsonMetadataStore) -> None:
    event = await json_store.create_event("Party")
    other = await json_store.create_event("Other")
    await json_store.commit_uploads([_record(event.id, "old.jpg", 60), _record(event.id, "new.jpg")])
    await json_store.commit_uploads([_record(event.id, "mid.jpg", 30), _record(other.id, "x.jpg")])

    records = await json_store.list_uploads(event.id)

    assert [r.original_name for r in records] == ["new.jpg", "mid.jpg", "old.jpg"]
    assert records[0].guest_name == "Ali"
    assert await json_store.list_uploads("ffffff") == []


@pytest.mark.asyncio
async def test_concurrent_commits_lose_nothing(json_store: JsonMetadataStore) -> None:
    event = await json_store.create_event("Party")

    await asyncio.gather(
        *(json_store.commit_uploads([_record(event.id, f"{i}.jpg")]) for i in range(25))
    )

    records = await json_store.list_uploads(event.id)
    assert len(records) == 25
    assert len({r.id for r in records}) == 25


@pytest.mark.asyncio
async def test_commit_nothing_is_noop(json_store: JsonMetadataStore) -> None:
    await json_store.init()
    await json_store.commit_uploads([])
    assert orjson.loads(json_store.path.read_bytes())["uploads"] == []


@pytest.mark.asyncio
async def test_corrupt_document_is_reset(json_store: JsonMetadataStore) -> None:
    json_store.path.write_bytes(b"{not json")

    assert await json_store.find_event("abcdef") is None
    assert orjson.loads(json_store.path.read_bytes()) == {"events": [], "uploads": []}

    event = await json_store.create_event("After reset")
    assert await json_store.find_event(event.id) is not None


@pytest.mark.asyncio
async def test_missing_arrays_are_reset(json_store: JsonMetadataStore) -> None:
    json_store.path.write_bytes(b'{"events": {}}')

    assert await json_store.list_uploads("abcdef") == []


@pytest.mark.asyncio
async def test_no_temp_files_left(json_store: JsonMetadataStore) -> None:
    event = await json_store.create_event("Party")
    await json_store.commit_uploads([_record(event.id, "a.jpg")])

    assert [p.name for p in json_store.path.parent.iterdir()] == ["db.json"]
