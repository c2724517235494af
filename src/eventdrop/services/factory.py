"""Wires the configured backends into a MediaService."""

from __future__ import annotations

from eventdrop.config import settings
from eventdrop.persistence.factory import get_metadata_store
from eventdrop.services.media import MediaService
from eventdrop.storage.factory import get_credential_issuer, get_storage


def get_media_service() -> MediaService:
    """Build a MediaService on the process-wide storage and metadata store."""
    return MediaService(
        storage=get_storage(),
        issuer=get_credential_issuer(),
        store=get_metadata_store(),
        max_files=settings.max_files_per_request,
        max_file_size=settings.max_file_size_bytes,
        write_concurrency=settings.upload_write_concurrency,
        compression_level=settings.archive_compression_level,
        signed_url_ttl=settings.signed_url_ttl_seconds,
    )
