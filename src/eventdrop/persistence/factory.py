"""Metadata store factory for EventDrop."""

from __future__ import annotations

from pathlib import Path

from eventdrop.config import settings
from eventdrop.persistence.base import MetadataStore
from eventdrop.persistence.db import Database
from eventdrop.persistence.json_store import JsonMetadataStore
from eventdrop.persistence.sql_store import SqlMetadataStore

_store: MetadataStore | None = None


def get_metadata_store() -> MetadataStore:
    """Return a singleton MetadataStore based on settings."""
    global _store
    if _store is not None:
        return _store

    backend = settings.metadata_backend.lower()
    if backend == "json":
        _store = JsonMetadataStore(Path(settings.data_dir) / "db.json")
    elif backend == "sql":
        _store = SqlMetadataStore(Database(settings.database_url, echo=False))
    else:
        raise ValueError("Unsupported metadata_backend. Supported values: json, sql.")
    return _store


async def close_metadata_store() -> None:
    global _store
    if _store is not None:
        await _store.close()
    _store = None
