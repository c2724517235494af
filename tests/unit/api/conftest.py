"""Fixtures for API tests: the real app on local storage and a JSON store."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from eventdrop.api.app import create_app
from eventdrop.config import settings
from eventdrop.persistence import factory as persistence_factory
from eventdrop.persistence.json_store import JsonMetadataStore
from eventdrop.storage import factory as storage_factory
from eventdrop.storage.local import LocalStorage


@pytest.fixture
def storage(tmp_path: Path) -> LocalStorage:
    return LocalStorage(base_path=tmp_path / "uploads", chunk_size=1024)


@pytest.fixture
def client(
    tmp_path: Path, storage: LocalStorage, monkeypatch: pytest.MonkeyPatch
) -> Iterator[TestClient]:
    """TestClient running the app lifespan against temporary backends."""
    monkeypatch.setattr(storage_factory, "_storage", storage)
    monkeypatch.setattr(storage_factory, "_issuer", None)
    monkeypatch.setattr(
        persistence_factory, "_store", JsonMetadataStore(tmp_path / "data" / "db.json")
    )
    monkeypatch.setattr(settings, "base_url", "http://events.test/")
    monkeypatch.setattr(settings, "max_files_per_request", 3)
    monkeypatch.setattr(settings, "max_file_size_mb", 1)

    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture
def event(client: TestClient) -> dict[str, str]:
    """A freshly created event: its id and admin token."""
    response = client.post("/api/events", json={"eventName": "Wedding", "ownerName": "Ayse"})
    assert response.status_code == 201
    body = response.json()
    return {"id": body["eventId"], "token": body["adminUrl"].split("token=")[1]}
