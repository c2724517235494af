"""Storage backend factory for EventDrop.

The backend and its credential issuer are selected once, from settings, and
shared for the lifetime of the process.
"""

from __future__ import annotations

from eventdrop.config import settings
from eventdrop.storage.base import StorageBackend
from eventdrop.storage.credentials import CredentialIssuer, LocalCredentialIssuer
from eventdrop.storage.local import LocalStorage
from eventdrop.storage.s3 import S3Storage

_storage: StorageBackend | None = None
_issuer: CredentialIssuer | None = None


def get_storage() -> StorageBackend:
    """Return a singleton StorageBackend based on settings."""
    global _storage
    if _storage is not None:
        return _storage

    backend = settings.storage_backend.lower()
    if backend in {"s3", "supabase", "minio"}:
        if not settings.s3_bucket:
            raise ValueError("S3_BUCKET is required for storage_backend='s3'")
        _storage = S3Storage(
            bucket=settings.s3_bucket,
            prefix=settings.s3_prefix,
            endpoint_url=settings.s3_endpoint_url,
            region_name=settings.s3_region,
            aws_access_key_id=settings.s3_access_key_id,
            aws_secret_access_key=settings.s3_secret_access_key,
            signed_url_ttl=settings.signed_url_ttl_seconds,
            chunk_size=settings.stream_chunk_size,
        )
    elif backend == "local":
        _storage = LocalStorage(
            base_path=settings.uploads_dir,
            chunk_size=settings.stream_chunk_size,
        )
    else:
        raise ValueError("Unsupported storage_backend. Supported values: local, s3.")

    return _storage


def get_credential_issuer() -> CredentialIssuer:
    """Return the credential issuer matching the configured backend."""
    global _issuer
    if _issuer is not None:
        return _issuer

    storage = get_storage()
    if isinstance(storage, S3Storage):
        _issuer = storage.credentials
    else:
        _issuer = LocalCredentialIssuer()
    return _issuer


async def close_storage() -> None:
    """Close the shared backend and forget the singletons."""
    global _storage, _issuer
    if _storage is not None:
        await _storage.close()
    _storage = None
    _issuer = None
