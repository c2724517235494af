"""Media ingestion and retrieval services.

- UploadTransaction: write payloads, commit metadata, compensate on failure
- ArchiveExporter: stream an event's uploads as one ZIP archive
- MediaService: the operations offered to the API and CLI
"""

from eventdrop.services.archive import ArchiveExporter
from eventdrop.services.compensation import CompensationLog
from eventdrop.services.media import ArchiveDownload, GalleryItem, MediaService
from eventdrop.services.upload import IncomingFile, IngestResult, UploadTransaction

__all__ = [
    "ArchiveDownload",
    "ArchiveExporter",
    "CompensationLog",
    "GalleryItem",
    "IncomingFile",
    "IngestResult",
    "MediaService",
    "UploadTransaction",
]
