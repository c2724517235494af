"""Local filesystem storage.

Stores objects in an event-scoped directory structure:
    {base_path}/{event_id}/{unix_ms}-{uuid4}{ext}

Writes land in a temporary sibling file and are renamed into place, so a
key never points at a partially written file.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from pathlib import Path
from uuid import uuid4

import aiofiles  # type: ignore[import-untyped]
import aiofiles.os  # type: ignore[import-untyped]

from eventdrop.errors import ObjectNotFoundError, StorageReadError, StorageWriteError
from eventdrop.models import StorageObjectRef
from eventdrop.storage.base import ObjectStream, StorageBackend, ensure_in_namespace

logger = logging.getLogger(__name__)


class LocalStorage(StorageBackend):
    """Local filesystem storage backend."""

    name = "local"
    skip_missing_on_export = True

    CHUNK_SIZE = 64 * 1024  # 64KB chunks for streaming

    def __init__(self, base_path: str | Path = "uploads", chunk_size: int | None = None):
        """Initialize local storage.

        Args:
            base_path: Base directory holding one sub-directory per event
            chunk_size: Read size for streaming
        """
        self.base_path = Path(base_path)
        self.chunk_size = chunk_size or self.CHUNK_SIZE

    def _get_path(self, ref: StorageObjectRef) -> Path:
        file_name = ensure_in_namespace(ref)
        return self.base_path / ref.event_id / file_name

    async def write(
        self,
        event_id: str,
        payload: bytes,
        content_type: str,
        original_name: str | None = None,
    ) -> StorageObjectRef:
        """Write a payload to the event directory."""
        ref = self.new_ref(event_id, content_type, original_name)
        path = self._get_path(ref)
        tmp_path = path.with_name(f".{path.name}.{uuid4().hex}.part")

        try:
            await aiofiles.os.makedirs(path.parent, exist_ok=True)
            async with aiofiles.open(tmp_path, "wb") as f:
                await f.write(payload)
                await f.flush()
            await aiofiles.os.replace(tmp_path, path)
        except OSError as e:
            await self._discard(tmp_path)
            raise StorageWriteError(f"Failed to write {ref.key}: {e}") from e
        except asyncio.CancelledError:
            await asyncio.shield(self._discard(tmp_path))
            raise

        logger.debug(f"Stored {ref.key} at {path} ({len(payload)} bytes)")
        return ref

    async def open_read_stream(self, ref: StorageObjectRef) -> ObjectStream:
        """Open the file and stream it in chunks."""
        path = self._get_path(ref)
        try:
            f = await aiofiles.open(path, "rb")
        except FileNotFoundError as e:
            raise ObjectNotFoundError(ref.key) from e
        except OSError as e:
            raise StorageReadError(f"Failed to open {ref.key}: {e}") from e

        chunk_size = self.chunk_size

        async def chunks() -> AsyncIterator[bytes]:
            while True:
                chunk = await f.read(chunk_size)
                if not chunk:
                    break
                yield chunk

        return ObjectStream(chunks(), f.close)

    async def remove(self, ref: StorageObjectRef) -> None:
        """Unlink a file from the event directory."""
        try:
            path = self._get_path(ref)
            await aiofiles.os.remove(path)
            logger.debug(f"Removed {ref.key}")
        except FileNotFoundError:
            logger.debug(f"Nothing to remove at {ref.key}")
        except Exception:
            logger.exception(f"Failed to remove {ref.key}")

    async def exists(self, ref: StorageObjectRef) -> bool:
        """Check if the file exists."""
        return bool(await aiofiles.os.path.isfile(self._get_path(ref)))

    async def _discard(self, path: Path) -> None:
        try:
            await aiofiles.os.remove(path)
        except OSError:
            pass  # Temp file may never have been created
