"""Credential issuers for fetching single stored objects.

Two mechanisms behind one contract:
- LocalCredentialIssuer: a non-expiring capability URL carrying the event's
  admin secret; the secret is re-checked each time the URL is redeemed
- SignedUrlIssuer: presigned S3 GET URLs whose expiry the provider enforces
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, cast
from urllib.parse import quote, urlencode

from botocore.exceptions import BotoCoreError, ClientError

from eventdrop.errors import StorageReadError
from eventdrop.models import StorageObjectRef, utc_now
from eventdrop.storage.base import ensure_in_namespace

if TYPE_CHECKING:
    from eventdrop.storage.s3 import S3Storage


@dataclass(frozen=True)
class Credential:
    """Time-bounded authorization to fetch one object."""

    url: str
    expires_at: datetime | None = None

    @property
    def expired(self) -> bool:
        return self.expires_at is not None and utc_now() >= self.expires_at


class CredentialIssuer(ABC):
    """Abstract base class for credential issuers."""

    @abstractmethod
    async def issue(
        self,
        ref: StorageObjectRef,
        ttl: int | None = None,
        *,
        secret: str | None = None,
    ) -> Credential:
        """Issue a credential for one object.

        Args:
            ref: Object handle
            ttl: Lifetime in seconds (issuer default when None)
            secret: Admin secret embedded in capability URLs; ignored by
                issuers whose URLs are self-authenticating

        Returns:
            Credential for the object
        """
        ...

    async def issue_batch(
        self,
        refs: Sequence[StorageObjectRef],
        ttl: int | None = None,
        *,
        secret: str | None = None,
    ) -> list[Credential]:
        """Issue credentials for many objects, preserving input order."""
        return list(await asyncio.gather(*(self.issue(ref, ttl, secret=secret) for ref in refs)))


class LocalCredentialIssuer(CredentialIssuer):
    """Capability URLs redeemed by the file route of the API."""

    def __init__(self, file_route: str = "/admin/file"):
        self.file_route = file_route.rstrip("/")

    async def issue(
        self,
        ref: StorageObjectRef,
        ttl: int | None = None,
        *,
        secret: str | None = None,
    ) -> Credential:
        file_name = ensure_in_namespace(ref)
        url = f"{self.file_route}/{quote(ref.event_id, safe='')}/{quote(file_name, safe='')}"
        if secret:
            url = f"{url}?{urlencode({'token': secret})}"
        return Credential(url=url, expires_at=None)


class SignedUrlIssuer(CredentialIssuer):
    """Presigned GET URLs from an S3-compatible object store."""

    def __init__(self, storage: S3Storage, default_ttl: int = 3600):
        self.storage = storage
        self.default_ttl = default_ttl

    async def issue(
        self,
        ref: StorageObjectRef,
        ttl: int | None = None,
        *,
        secret: str | None = None,
    ) -> Credential:
        expires_in = ttl if ttl is not None else self.default_ttl
        key = self.storage.object_key(ref)
        issued_at = utc_now()

        session = await self.storage._get_session()
        async with session.client(
            "s3",
            endpoint_url=self.storage.endpoint_url,
        ) as s3:
            try:
                url = await s3.generate_presigned_url(
                    "get_object",
                    Params={"Bucket": self.storage.bucket, "Key": key},
                    ExpiresIn=expires_in,
                )
            except (BotoCoreError, ClientError) as e:
                raise StorageReadError(f"Failed to sign URL for {ref.key}: {e}") from e

        return Credential(
            url=cast(str, url),
            expires_at=issued_at + timedelta(seconds=expires_in),
        )

    async def issue_batch(
        self,
        refs: Sequence[StorageObjectRef],
        ttl: int | None = None,
        *,
        secret: str | None = None,
    ) -> list[Credential]:
        """Sign many URLs with one client, preserving input order."""
        if not refs:
            return []
        expires_in = ttl if ttl is not None else self.default_ttl
        issued_at = utc_now()

        session = await self.storage._get_session()
        async with session.client(
            "s3",
            endpoint_url=self.storage.endpoint_url,
        ) as s3:
            try:
                urls: list[Any] = [
                    await s3.generate_presigned_url(
                        "get_object",
                        Params={"Bucket": self.storage.bucket, "Key": self.storage.object_key(ref)},
                        ExpiresIn=expires_in,
                    )
                    for ref in refs
                ]
            except (BotoCoreError, ClientError) as e:
                raise StorageReadError(f"Failed to sign URLs: {e}") from e

        expires_at = issued_at + timedelta(seconds=expires_in)
        return [Credential(url=cast(str, url), expires_at=expires_at) for url in urls]
