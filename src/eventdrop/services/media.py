"""Event media service: the operations exposed to the HTTP and CLI layers."""

from __future__ import annotations

import hmac
import logging
from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass

from eventdrop.errors import AuthorizationError, EventNotFoundError, NothingToExportError
from eventdrop.models import Event, UploadRecord
from eventdrop.persistence.base import MetadataStore
from eventdrop.services.archive import ArchiveExporter
from eventdrop.services.naming import archive_filename
from eventdrop.services.upload import IncomingFile, IngestResult, UploadTransaction, clean_text
from eventdrop.storage.base import ObjectStream, StorageBackend, ref_for_file
from eventdrop.storage.credentials import Credential, CredentialIssuer

logger = logging.getLogger(__name__)


@dataclass
class ArchiveDownload:
    """A streamed archive plus the headers needed to serve it."""

    filename: str
    chunks: AsyncIterator[bytes]
    media_type: str = "application/zip"

    @property
    def content_disposition(self) -> str:
        return f'attachment; filename="{self.filename}"'


@dataclass
class GalleryItem:
    record: UploadRecord
    credential: Credential


class MediaService:
    """Ingestion, gallery and export operations for events."""

    def __init__(
        self,
        storage: StorageBackend,
        issuer: CredentialIssuer,
        store: MetadataStore,
        max_files: int = 20,
        max_file_size: int = 200 * 1024 * 1024,
        write_concurrency: int = 4,
        compression_level: int = 9,
        signed_url_ttl: int | None = None,
    ):
        self.storage = storage
        self.issuer = issuer
        self.store = store
        self.max_files = max_files
        self.max_file_size = max_file_size
        self.write_concurrency = write_concurrency
        self.compression_level = compression_level
        self.signed_url_ttl = signed_url_ttl

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    async def create_event(self, name: str, date: str = "", owner_name: str = "") -> Event:
        return await self.store.create_event(
            name=clean_text(name, 120),
            date=clean_text(date, 40),
            owner_name=clean_text(owner_name, 80),
        )

    async def get_event(self, event_id: str) -> Event:
        event = await self.store.find_event(event_id)
        if event is None:
            raise EventNotFoundError(event_id)
        return event

    async def authorize(self, event_id: str, token: str | None) -> Event:
        """Return the event if ``token`` is its admin secret."""
        event = await self.get_event(event_id)
        if not token or not hmac.compare_digest(event.admin_token.encode(), token.encode()):
            raise AuthorizationError()
        return event

    # -------------------------------------------------------------------------
    # Uploads
    # -------------------------------------------------------------------------

    async def ingest(
        self,
        event_id: str,
        guest_name: str | None,
        files: Sequence[IncomingFile],
    ) -> IngestResult:
        transaction = UploadTransaction(
            self.storage,
            self.store,
            max_files=self.max_files,
            max_file_size=self.max_file_size,
            write_concurrency=self.write_concurrency,
        )
        return await transaction.run(event_id, guest_name, files)

    async def gallery(self, event: Event) -> list[GalleryItem]:
        """Uploads of an event, newest first, each with a view credential."""
        records = await self.store.list_uploads(event.id)
        credentials = await self.issuer.issue_batch(
            [record.ref for record in records],
            self.signed_url_ttl,
            secret=event.admin_token,
        )
        return [
            GalleryItem(record=record, credential=credential)
            for record, credential in zip(records, credentials, strict=True)
        ]

    async def open_file(self, event: Event, file_name: str) -> tuple[UploadRecord | None, ObjectStream]:
        """Open one stored object of an event (redeems a local capability URL)."""
        records = await self.store.list_uploads(event.id)
        key = f"{event.id}/{file_name}"
        record = next((item for item in records if item.storage_path == key), None)
        content_type = record.content_type if record else "application/octet-stream"
        stream = await self.storage.open_read_stream(ref_for_file(event.id, file_name, content_type))
        return record, stream

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    async def export_archive(self, event_id: str) -> ArchiveDownload:
        """Archive of every upload of an event, newest first."""
        event = await self.get_event(event_id)
        records = await self.store.list_uploads(event.id)
        if not records:
            raise NothingToExportError(event.id)

        exporter = ArchiveExporter(self.storage, compression_level=self.compression_level)
        logger.info(f"Exporting {len(records)} uploads of event {event.id}")
        return ArchiveDownload(
            filename=archive_filename(event.name, event.id),
            chunks=exporter.stream(records),
        )
