"""Upload ingestion: write payloads first, then commit metadata as one unit.

An UploadRecord is only ever committed after its object is fully written.
If any write or the metadata commit fails, every object written for the
batch is removed again before the error reaches the caller.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from eventdrop.errors import (
    EventNotFoundError,
    MetadataCommitError,
    StorageWriteError,
    ValidationError,
)
from eventdrop.models import StorageObjectRef, UploadRecord, utc_now
from eventdrop.persistence.base import MetadataStore
from eventdrop.services.compensation import CompensationLog
from eventdrop.storage.base import StorageBackend

logger = logging.getLogger(__name__)

ALLOWED_MEDIA_PREFIXES = ("image/", "video/")
MAX_GUEST_NAME_LENGTH = 80


@dataclass
class IncomingFile:
    """One file of an upload batch as received from the client."""

    payload: bytes
    content_type: str
    original_name: str
    size: int | None = None

    def __post_init__(self) -> None:
        if self.size is None:
            self.size = len(self.payload)


@dataclass
class IngestResult:
    accepted_count: int


def clean_text(value: str | None, max_length: int) -> str:
    """Trim and truncate free-text input."""
    if not isinstance(value, str):
        return ""
    return value.strip()[:max_length]


class UploadTransaction:
    """Two-phase upload of one batch for one event."""

    def __init__(
        self,
        storage: StorageBackend,
        store: MetadataStore,
        max_files: int,
        max_file_size: int,
        write_concurrency: int = 4,
    ):
        self.storage = storage
        self.store = store
        self.max_files = max_files
        self.max_file_size = max_file_size
        self.write_concurrency = max(1, write_concurrency)

    def validate(self, files: Sequence[IncomingFile]) -> None:
        """Reject the whole batch before anything is written."""
        if not files:
            raise ValidationError("Select at least one file")
        if len(files) > self.max_files:
            raise ValidationError(f"Too many files: at most {self.max_files} per upload")
        for item in files:
            size = item.size if item.size is not None else len(item.payload)
            if size > self.max_file_size:
                raise ValidationError(
                    f"File '{item.original_name}' exceeds the limit of {self.max_file_size} bytes"
                )
            if not (item.content_type or "").startswith(ALLOWED_MEDIA_PREFIXES):
                raise ValidationError(
                    f"Only photos or videos can be uploaded ('{item.original_name}' is "
                    f"{item.content_type or 'unknown'})"
                )

    async def run(
        self,
        event_id: str,
        guest_name: str | None,
        files: Sequence[IncomingFile],
    ) -> IngestResult:
        if await self.store.find_event(event_id) is None:
            raise EventNotFoundError(event_id)
        self.validate(files)

        compensation = CompensationLog()
        refs = await self._write_all(event_id, files, compensation)

        uploaded_at = utc_now()
        guest = clean_text(guest_name, MAX_GUEST_NAME_LENGTH)
        records = [
            UploadRecord(
                event_id=event_id,
                guest_name=guest,
                original_name=item.original_name,
                storage_path=ref.key,
                content_type=item.content_type,
                size=item.size or 0,
                uploaded_at=uploaded_at,
            )
            for item, ref in zip(files, refs)
        ]

        try:
            await self.store.commit_uploads(records)
        except BaseException as e:
            logger.error(f"Metadata commit failed for event {event_id}, removing {len(refs)} objects")
            # Cleanup must finish even if the request task is cancelled again
            await asyncio.shield(compensation.run())
            if isinstance(e, MetadataCommitError) or not isinstance(e, Exception):
                raise
            raise MetadataCommitError(f"Failed to commit uploads: {e}") from e

        logger.info(f"Accepted {len(records)} uploads for event {event_id}")
        return IngestResult(accepted_count=len(records))

    async def _write_all(
        self,
        event_id: str,
        files: Sequence[IncomingFile],
        compensation: CompensationLog,
    ) -> list[StorageObjectRef]:
        """Write every payload with bounded concurrency, in input order."""
        semaphore = asyncio.Semaphore(self.write_concurrency)

        async def write_one(item: IncomingFile) -> StorageObjectRef:
            async with semaphore:
                ref = await self.storage.write(
                    event_id, item.payload, item.content_type, item.original_name
                )
            compensation.add(f"remove {ref.key}", lambda: self.storage.remove(ref))
            return ref

        try:
            results = await asyncio.gather(
                *(write_one(item) for item in files),
                return_exceptions=True,
            )
        except BaseException:
            logger.warning(f"Upload for event {event_id} interrupted, removing {len(compensation)} objects")
            await asyncio.shield(compensation.run())
            raise

        errors = [result for result in results if isinstance(result, BaseException)]
        if errors:
            logger.error(f"{len(errors)} of {len(files)} writes failed for event {event_id}")
            await compensation.run()
            first = errors[0]
            if isinstance(first, StorageWriteError):
                raise first
            raise StorageWriteError(f"Failed to store upload: {first}") from first

        return [result for result in results if isinstance(result, StorageObjectRef)]
