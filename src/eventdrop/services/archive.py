"""Streaming ZIP export of an event's uploads.

The archive is produced as an async iterator of bytes:

    object stream -> zipfile entry writer -> ArchiveSink -> consumer

zipfile writes into an unseekable sink, so every entry uses a data
descriptor and nothing needs to be rewound. Each chunk read from storage is
compressed and the produced bytes are handed to the consumer before the
next chunk is read; the next record is only opened once the consumer asks
for more data.
"""

from __future__ import annotations

import logging
import zipfile
from collections.abc import AsyncIterator, Sequence

from eventdrop.errors import ObjectNotFoundError
from eventdrop.models import UploadRecord
from eventdrop.services.naming import build_entry_name
from eventdrop.storage.base import StorageBackend

logger = logging.getLogger(__name__)

# Entries that might exceed the classic ZIP limits need ZIP64 headers up front
ZIP64_THRESHOLD = (1 << 31) - 1


class ArchiveSink:
    """Write-only, unseekable buffer that zipfile writes into.

    Not providing ``tell``/``seek`` makes zipfile switch to streaming mode.
    """

    def __init__(self) -> None:
        self._parts: list[bytes] = []
        self.bytes_written = 0

    def write(self, data: bytes) -> int:
        if data:
            self._parts.append(bytes(data))
            self.bytes_written += len(data)
        return len(data)

    def flush(self) -> None:
        pass

    def close(self) -> None:
        pass

    def drain(self) -> bytes:
        data = b"".join(self._parts)
        self._parts.clear()
        return data


class ArchiveExporter:
    """Builds one ZIP stream from a list of upload records."""

    def __init__(self, storage: StorageBackend, compression_level: int = 9):
        self.storage = storage
        self.compression_level = compression_level

    async def stream(self, records: Sequence[UploadRecord]) -> AsyncIterator[bytes]:
        """Yield the archive in order, one record at a time.

        Records are archived in the order given. Missing objects are skipped
        or abort the stream depending on the backend's export policy. If the
        consumer stops iterating, the open source stream is closed and no
        further records are read.
        """
        sink = ArchiveSink()
        archive = zipfile.ZipFile(
            sink,
            mode="w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=self.compression_level,
        )
        written = 0
        try:
            for index, record in enumerate(records):
                try:
                    source = await self.storage.open_read_stream(record.ref)
                except ObjectNotFoundError:
                    if not self.storage.skip_missing_on_export:
                        logger.error(f"Export aborted: {record.storage_path} is missing")
                        raise
                    logger.warning(f"Skipping missing object {record.storage_path}")
                    continue

                name = build_entry_name(record, index)
                async with source:
                    with archive.open(
                        name, mode="w", force_zip64=record.size * 1.05 > ZIP64_THRESHOLD
                    ) as entry:
                        async for chunk in source:
                            entry.write(chunk)
                            data = sink.drain()
                            if data:
                                yield data
                written += 1
                data = sink.drain()
                if data:
                    yield data

            archive.close()
            yield sink.drain()
            logger.info(
                f"Exported {written} of {len(records)} records ({sink.bytes_written} bytes)"
            )
        finally:
            # On abort this only writes an end record into the discarded sink
            archive.close()
