"""Tests for the organizer gallery, bulk download and file view."""

from __future__ import annotations

import io
import zipfile

import pytest
from fastapi.testclient import TestClient

JPEG = b"\xff\xd8\xff\xe0fake-jpeg"


@pytest.fixture
def uploaded(client: TestClient, event: dict[str, str]) -> dict[str, str]:
    files = [
        ("files", ("family photo.jpg", JPEG, "image/jpeg")),
        ("files", ("cake.jpg", b"cake-bytes", "image/jpeg")),
    ]
    response = client.post(f"/api/e/{event['id']}/upload", files=files, data={"guestName": "Can"})
    assert response.status_code == 201
    return event


class TestAdminAccess:
    """Test admin secret checks."""

    @pytest.mark.parametrize("token", ["", "wrong", "0" * 32])
    def test_wrong_token_forbidden(self, client: TestClient, event: dict[str, str], token: str) -> None:
        response = client.get(f"/api/admin/{event['id']}", params={"token": token})

        assert response.status_code == 403
        assert response.json()["error"] == "Unauthorized access"

    def test_missing_token_forbidden(self, client: TestClient, event: dict[str, str]) -> None:
        assert client.get(f"/api/admin/{event['id']}").status_code == 403
        assert client.get(f"/admin/{event['id']}/download.zip").status_code == 403

    def test_unknown_event(self, client: TestClient) -> None:
        response = client.get("/api/admin/ffffff", params={"token": "x"})

        assert response.status_code == 404


class TestGallery:
    """Test GET /api/admin/{event_id}."""

    def test_lists_uploads_with_view_links(self, client: TestClient, uploaded: dict[str, str]) -> None:
        response = client.get(f"/api/admin/{uploaded['id']}", params={"token": uploaded["token"]})

        assert response.status_code == 200
        body = response.json()
        assert body["eventName"] == "Wedding"
        assert body["joinUrl"] == f"http://events.test/api/e/{uploaded['id']}"
        assert body["downloadUrl"].endswith(f"/admin/{uploaded['id']}/download.zip?token={uploaded['token']}")
        assert [item["originalName"] for item in body["uploads"]] == ["family photo.jpg", "cake.jpg"]
        for item in body["uploads"]:
            assert item["guestName"] == "Can"
            assert item["mimeType"] == "image/jpeg"
            assert item["viewUrl"].startswith(f"/admin/file/{uploaded['id']}/")
            assert item["viewUrlExpiresAt"] is None

    def test_view_link_serves_file(self, client: TestClient, uploaded: dict[str, str]) -> None:
        body = client.get(f"/api/admin/{uploaded['id']}", params={"token": uploaded["token"]}).json()
        cake = next(item for item in body["uploads"] if item["originalName"] == "cake.jpg")

        response = client.get(cake["viewUrl"])

        assert response.status_code == 200
        assert response.content == b"cake-bytes"
        assert response.headers["content-type"] == "image/jpeg"
        assert "cake.jpg" in response.headers["content-disposition"]

    def test_empty_gallery(self, client: TestClient, event: dict[str, str]) -> None:
        body = client.get(f"/api/admin/{event['id']}", params={"token": event["token"]}).json()

        assert body["uploads"] == []


class TestFileView:
    """Test GET /admin/file/{event_id}/{file_name}."""

    def test_missing_file(self, client: TestClient, event: dict[str, str]) -> None:
        response = client.get(
            f"/admin/file/{event['id']}/1700000000000-missing.jpg", params={"token": event["token"]}
        )

        assert response.status_code == 404

    def test_invalid_file_name(self, client: TestClient, event: dict[str, str]) -> None:
        response = client.get(
            f"/admin/file/{event['id']}/bad name!.jpg", params={"token": event["token"]}
        )

        assert response.status_code == 400

    def test_requires_token(self, client: TestClient, uploaded: dict[str, str]) -> None:
        body = client.get(f"/api/admin/{uploaded['id']}", params={"token": uploaded["token"]}).json()
        view_url = body["uploads"][0]["viewUrl"].split("?")[0]

        assert client.get(view_url).status_code == 403


class TestDownload:
    """Test GET /admin/{event_id}/download.zip."""

    def test_streams_zip(self, client: TestClient, uploaded: dict[str, str]) -> None:
        response = client.get(
            f"/admin/{uploaded['id']}/download.zip", params={"token": uploaded["token"]}
        )

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/zip"
        assert (
            response.headers["content-disposition"]
            == f'attachment; filename="Wedding-{uploaded["id"]}.zip"'
        )
        archive = zipfile.ZipFile(io.BytesIO(response.content))
        assert archive.namelist() == ["001-family-photo.jpg", "002-cake.jpg"]
        assert archive.read("001-family-photo.jpg") == JPEG
        assert archive.read("002-cake.jpg") == b"cake-bytes"

    def test_nothing_to_export(self, client: TestClient, event: dict[str, str]) -> None:
        response = client.get(f"/admin/{event['id']}/download.zip", params={"token": event["token"]})

        assert response.status_code == 404
        assert response.json()["code"] == "NotFound"
