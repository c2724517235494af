"""Object storage module for EventDrop.

Provides one storage contract over two providers:
- Local filesystem storage (default)
- S3-compatible storage (Supabase Storage, MinIO, AWS S3)

and the matching credential issuers used to hand out per-object read links.
"""

from eventdrop.storage.base import ObjectStream, StorageBackend
from eventdrop.storage.credentials import (
    Credential,
    CredentialIssuer,
    LocalCredentialIssuer,
    SignedUrlIssuer,
)
from eventdrop.storage.factory import close_storage, get_credential_issuer, get_storage
from eventdrop.storage.local import LocalStorage
from eventdrop.storage.s3 import S3Storage

__all__ = [
    "StorageBackend",
    "ObjectStream",
    "LocalStorage",
    "S3Storage",
    "Credential",
    "CredentialIssuer",
    "LocalCredentialIssuer",
    "SignedUrlIssuer",
    "get_storage",
    "get_credential_issuer",
    "close_storage",
]
