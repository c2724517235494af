"""Tests for credential issuers."""

from __future__ import annotations

from datetime import timedelta

import pytest

from eventdrop.errors import ValidationError
from eventdrop.models import StorageObjectRef, utc_now
from eventdrop.storage.credentials import Credential, LocalCredentialIssuer
from eventdrop.storage.s3 import S3Storage


def _ref(name: str, event_id: str = "evt123") -> StorageObjectRef:
    return StorageObjectRef(event_id=event_id, key=f"{event_id}/{name}", content_type="image/jpeg")


class TestCredential:
    """Test Credential expiry."""

    def test_no_expiry(self) -> None:
        assert not Credential(url="/x").expired

    def test_expired(self) -> None:
        assert Credential(url="/x", expires_at=utc_now() - timedelta(seconds=1)).expired

    def test_not_yet_expired(self) -> None:
        assert not Credential(url="/x", expires_at=utc_now() + timedelta(minutes=5)).expired


class TestLocalCredentialIssuer:
    """Test capability URLs for the local backend."""

    @pytest.mark.asyncio
    async def test_issue_embeds_secret(self) -> None:
        issuer = LocalCredentialIssuer()

        credential = await issuer.issue(_ref("1700000000000-a.jpg"), secret="s3cr3t")

        assert credential.url == "/admin/file/evt123/1700000000000-a.jpg?token=s3cr3t"
        assert credential.expires_at is None

    @pytest.mark.asyncio
    async def test_issue_without_secret(self) -> None:
        issuer = LocalCredentialIssuer(file_route="/files/")

        credential = await issuer.issue(_ref("1700000000000-a.jpg"))

        assert credential.url == "/files/evt123/1700000000000-a.jpg"

    @pytest.mark.asyncio
    async def test_batch_preserves_order(self) -> None:
        issuer = LocalCredentialIssuer()
        names = [f"170000000000{i}-photo.jpg" for i in range(5)]

        credentials = await issuer.issue_batch([_ref(name) for name in names], secret="t")

        assert [c.url.split("/")[-1].split("?")[0] for c in credentials] == names

    @pytest.mark.asyncio
    async def test_refuses_foreign_key(self) -> None:
        issuer = LocalCredentialIssuer()
        forged = StorageObjectRef(event_id="evt123", key="evt999/1700000000000-a.jpg")

        with pytest.raises(ValidationError):
            await issuer.issue(forged)


class TestSignedUrlIssuer:
    """Test presigned URLs for the object store backend."""

    @pytest.mark.asyncio
    async def test_default_ttl(self, s3_storage: S3Storage, fake_s3) -> None:
        before = utc_now()

        credential = await s3_storage.credentials.issue(_ref("1700000000000-a.jpg"))

        assert credential.url.endswith("/event-media/evt123/1700000000000-a.jpg?X-Amz-Expires=3600")
        assert credential.expires_at is not None
        assert credential.expires_at - before >= timedelta(seconds=3600)
        assert fake_s3.signed == [("evt123/1700000000000-a.jpg", 3600)]

    @pytest.mark.asyncio
    async def test_explicit_ttl(self, s3_storage: S3Storage, fake_s3) -> None:
        credential = await s3_storage.credentials.issue(_ref("1700000000000-a.jpg"), ttl=60)

        assert credential.url.endswith("X-Amz-Expires=60")
        assert not credential.expired

    @pytest.mark.asyncio
    async def test_zero_ttl_is_not_replaced_by_default(self, s3_storage: S3Storage, fake_s3) -> None:
        credential = await s3_storage.credentials.issue(_ref("1700000000000-a.jpg"), ttl=0)

        assert credential.url.endswith("X-Amz-Expires=0")
        assert credential.expired
        assert fake_s3.signed == [("evt123/1700000000000-a.jpg", 0)]

    @pytest.mark.asyncio
    async def test_zero_ttl_batch(self, s3_storage: S3Storage, fake_s3) -> None:
        await s3_storage.credentials.issue_batch([_ref("1700000000000-a.jpg")], ttl=0)

        assert fake_s3.signed == [("evt123/1700000000000-a.jpg", 0)]

    @pytest.mark.asyncio
    async def test_batch_preserves_order(self, s3_storage: S3Storage) -> None:
        names = [f"170000000000{i}-photo.jpg" for i in (3, 1, 4, 0, 2)]

        credentials = await s3_storage.credentials.issue_batch([_ref(name) for name in names])

        assert [c.url.split("/")[-1].split("?")[0] for c in credentials] == names

    @pytest.mark.asyncio
    async def test_empty_batch(self, s3_storage: S3Storage) -> None:
        assert await s3_storage.credentials.issue_batch([]) == []
