"""Event media in an S3-compatible bucket (AWS S3, MinIO, Supabase Storage).

Keys are ``{prefix}{event_id}/{unix_ms}-{uuid4}{ext}``. Reads go through
presigned URLs fetched with httpx rather than GetObject, so the same path
serves the gallery links and the archive export.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING

import httpx
from botocore.exceptions import BotoCoreError, ClientError

from eventdrop.errors import ObjectNotFoundError, StorageReadError, StorageWriteError
from eventdrop.models import StorageObjectRef
from eventdrop.storage.base import ObjectStream, StorageBackend, ensure_in_namespace
from eventdrop.storage.credentials import SignedUrlIssuer

if TYPE_CHECKING:
    import aioboto3

logger = logging.getLogger(__name__)

# HeadObject has no body, so a missing key surfaces as a bare status code
NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


class S3Storage(StorageBackend):
    """Object-store backend: aioboto3 for put, delete and signing; httpx for
    streaming bodies back out of the bucket.

    A missing object during export is fatal here, unlike on local disk: the
    metadata row and the bucket are expected to agree.
    """

    name = "s3"
    skip_missing_on_export = False

    def __init__(
        self,
        bucket: str,
        prefix: str = "",
        endpoint_url: str | None = None,
        region_name: str = "us-east-1",
        aws_access_key_id: str | None = None,
        aws_secret_access_key: str | None = None,
        signed_url_ttl: int = 3600,
        chunk_size: int = 64 * 1024,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Credentials left as None fall back to the AWS SDK chain.

        ``http_client`` is the client that fetches presigned URLs; one is
        created on first read when not given.
        """
        self.bucket = bucket
        self.prefix = prefix.rstrip("/") + "/" if prefix else ""
        self.endpoint_url = endpoint_url
        self.region_name = region_name
        self.aws_access_key_id = aws_access_key_id
        self.aws_secret_access_key = aws_secret_access_key
        self.chunk_size = chunk_size
        self.credentials = SignedUrlIssuer(self, default_ttl=signed_url_ttl)
        self._http = http_client
        self._session: "aioboto3.Session | None" = None

    async def _get_session(self) -> "aioboto3.Session":
        if self._session is None:
            import aioboto3

            self._session = aioboto3.Session(
                aws_access_key_id=self.aws_access_key_id,
                aws_secret_access_key=self.aws_secret_access_key,
                region_name=self.region_name,
            )
        return self._session

    def _get_http(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=httpx.Timeout(30.0, read=None))
        return self._http

    def object_key(self, ref: StorageObjectRef) -> str:
        """Full bucket key for a handle: {prefix}{event_id}/{file_name}."""
        ensure_in_namespace(ref)
        return f"{self.prefix}{ref.key}"

    async def write(
        self,
        event_id: str,
        payload: bytes,
        content_type: str,
        original_name: str | None = None,
    ) -> StorageObjectRef:
        """Upload a payload with a single PutObject call."""
        ref = self.new_ref(event_id, content_type, original_name)
        key = self.object_key(ref)

        session = await self._get_session()
        try:
            async with session.client(
                "s3",
                endpoint_url=self.endpoint_url,
            ) as s3:
                await s3.put_object(
                    Bucket=self.bucket,
                    Key=key,
                    Body=payload,
                    ContentType=content_type,
                    CacheControl="max-age=3600",
                )
        except (BotoCoreError, ClientError) as e:
            raise StorageWriteError(f"Failed to upload {ref.key}: {e}") from e

        logger.debug(f"Uploaded s3://{self.bucket}/{key} ({len(payload)} bytes)")
        return ref

    async def open_read_stream(self, ref: StorageObjectRef) -> ObjectStream:
        """Fetch an object through a freshly signed URL."""
        credential = await self.credentials.issue(ref)
        client = self._get_http()

        try:
            request = client.build_request("GET", credential.url)
            response = await client.send(request, stream=True)
        except httpx.HTTPError as e:
            raise StorageReadError(f"Failed to fetch {ref.key}: {e}") from e

        if response.status_code == 404:
            await response.aclose()
            raise ObjectNotFoundError(ref.key)
        if response.is_error:
            await response.aclose()
            raise StorageReadError(f"Failed to fetch {ref.key}: HTTP {response.status_code}")

        chunk_size = self.chunk_size

        async def chunks() -> AsyncIterator[bytes]:
            try:
                async for chunk in response.aiter_bytes(chunk_size):
                    yield chunk
            except httpx.HTTPError as e:
                raise StorageReadError(f"Failed to read {ref.key}: {e}") from e

        return ObjectStream(chunks(), response.aclose)

    async def remove(self, ref: StorageObjectRef) -> None:
        """Delete an object from S3."""
        session = await self._get_session()
        try:
            key = self.object_key(ref)
            async with session.client(
                "s3",
                endpoint_url=self.endpoint_url,
            ) as s3:
                await s3.delete_object(
                    Bucket=self.bucket,
                    Key=key,
                )
            logger.debug(f"Removed s3://{self.bucket}/{key}")
        except Exception:
            logger.exception(f"Failed to remove {ref.key}")

    async def exists(self, ref: StorageObjectRef) -> bool:
        """Check if an object exists in S3.

        Only a not-found answer means False; denied access or a server
        error raises StorageReadError.
        """
        key = self.object_key(ref)
        session = await self._get_session()

        try:
            async with session.client(
                "s3",
                endpoint_url=self.endpoint_url,
            ) as s3:
                await s3.head_object(
                    Bucket=self.bucket,
                    Key=key,
                )
            return True
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in NOT_FOUND_CODES:
                return False
            raise StorageReadError(f"Failed to check {ref.key}: {e}") from e
        except BotoCoreError as e:
            raise StorageReadError(f"Failed to check {ref.key}: {e}") from e

    async def close(self) -> None:
        """Close the HTTP client and drop the S3 session."""
        if self._http is not None:
            await self._http.aclose()
            self._http = None
        self._session = None
