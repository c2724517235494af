"""Global pytest configuration and fixtures.

Provides an in-memory fake of the S3 API (as seen through aioboto3) and an
httpx transport that serves its presigned URLs, so the object-store backend
can be exercised without a network.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from urllib.parse import parse_qs, urlparse

import httpx
import pytest
from botocore.exceptions import ClientError

from eventdrop.persistence.json_store import JsonMetadataStore
from eventdrop.storage.local import LocalStorage
from eventdrop.storage.s3 import S3Storage

FAKE_S3_HOST = "s3.test"


class BrokenBodyStream(httpx.AsyncByteStream):
    """Response body that drops the connection after the first chunk."""

    def __init__(self, first_chunk: bytes) -> None:
        self._first_chunk = first_chunk

    async def __aiter__(self):
        yield self._first_chunk
        raise httpx.ReadError("connection reset by peer")


class FakeS3Client:
    def __init__(self, backend: FakeS3Backend) -> None:
        self._backend = backend

    async def __aenter__(self) -> FakeS3Client:
        return self

    async def __aexit__(self, *args: Any) -> None:
        return None

    async def put_object(self, Bucket: str, Key: str, Body: bytes, **kwargs: Any) -> None:
        if self._backend.fail_puts_after is not None:
            if self._backend.put_count >= self._backend.fail_puts_after:
                raise ClientError({"Error": {"Code": "500", "Message": "boom"}}, "PutObject")
        self._backend.put_count += 1
        self._backend.objects[(Bucket, Key)] = bytes(Body)
        self._backend.content_types[(Bucket, Key)] = kwargs.get("ContentType", "")

    async def delete_object(self, Bucket: str, Key: str) -> None:
        self._backend.deleted.append(Key)
        self._backend.objects.pop((Bucket, Key), None)

    async def head_object(self, Bucket: str, Key: str) -> dict[str, Any]:
        if self._backend.head_error_code is not None:
            raise ClientError(
                {"Error": {"Code": self._backend.head_error_code, "Message": "Error"}}, "HeadObject"
            )
        if (Bucket, Key) not in self._backend.objects:
            raise ClientError({"Error": {"Code": "404", "Message": "Not Found"}}, "HeadObject")
        return {"ContentLength": len(self._backend.objects[(Bucket, Key)])}

    async def generate_presigned_url(
        self, operation: str, Params: dict[str, str], ExpiresIn: int
    ) -> str:
        self._backend.signed.append((Params["Key"], ExpiresIn))
        return f"https://{FAKE_S3_HOST}/{Params['Bucket']}/{Params['Key']}?X-Amz-Expires={ExpiresIn}"


class FakeS3Session:
    def __init__(self, backend: FakeS3Backend) -> None:
        self._backend = backend

    def client(self, service: str, endpoint_url: str | None = None) -> FakeS3Client:
        return FakeS3Client(self._backend)


class FakeS3Backend:
    """In-memory bucket store shared by the fake session and HTTP transport."""

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], bytes] = {}
        self.content_types: dict[tuple[str, str], str] = {}
        self.deleted: list[str] = []
        self.signed: list[tuple[str, int]] = []
        self.fetched: list[str] = []
        self.put_count = 0
        self.fail_puts_after: int | None = None
        self.head_error_code: str | None = None
        self.fetch_status: int | None = None
        self.break_body = False

    def handle(self, request: httpx.Request) -> httpx.Response:
        url = urlparse(str(request.url))
        bucket, key = url.path.lstrip("/").split("/", 1)
        assert "X-Amz-Expires" in parse_qs(url.query)
        self.fetched.append(key)
        if self.fetch_status is not None:
            return httpx.Response(self.fetch_status, content=b"<Error><Code>AccessDenied</Code></Error>")
        data = self.objects.get((bucket, key))
        if data is None:
            return httpx.Response(404, content=b"<Error><Code>NoSuchKey</Code></Error>")
        if self.break_body:
            return httpx.Response(200, stream=BrokenBodyStream(data[:4]))
        return httpx.Response(200, content=data)


@pytest.fixture
def fake_s3() -> FakeS3Backend:
    return FakeS3Backend()


@pytest.fixture
def s3_storage(fake_s3: FakeS3Backend, monkeypatch: pytest.MonkeyPatch) -> S3Storage:
    """S3Storage wired to the in-memory fake."""
    storage = S3Storage(
        bucket="event-media",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(fake_s3.handle)),
        chunk_size=4,
    )
    session = FakeS3Session(fake_s3)

    async def get_session() -> Any:
        return session

    monkeypatch.setattr(storage, "_get_session", get_session)
    return storage


@pytest.fixture
def local_storage(tmp_path: Path) -> LocalStorage:
    return LocalStorage(base_path=tmp_path / "uploads", chunk_size=4)


@pytest.fixture
def json_store(tmp_path: Path) -> JsonMetadataStore:
    """JSON store in a fresh data directory (document not yet created)."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    return JsonMetadataStore(data_dir / "db.json")
