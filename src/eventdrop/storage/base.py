"""Base storage backend interface.

Defines the abstract interface for object storage backends and the key
scheme shared by all of them.
"""

from __future__ import annotations

import re
import time
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Awaitable, Callable
from pathlib import PurePosixPath
from types import TracebackType
from uuid import uuid4

from eventdrop.errors import ValidationError
from eventdrop.models import StorageObjectRef

# Event ids are a single path segment; keys never nest deeper than one level
_SAFE_SEGMENT = re.compile(r"^[A-Za-z0-9_-]{1,64}$")
_SAFE_EXTENSION = re.compile(r"^\.[A-Za-z0-9]{1,10}$")
_SAFE_FILE_NAME = re.compile(r"^[A-Za-z0-9_-]+(\.[A-Za-z0-9]{1,10})?$")


class ObjectStream:
    """Lazy, finite, non-restartable byte stream for one stored object.

    Wraps an async chunk iterator together with the callback that releases
    the underlying resource (file handle, HTTP response). The resource is
    released when the stream is exhausted or fails; ``aclose`` releases it
    early and is safe to call more than once.
    """

    def __init__(
        self,
        chunks: AsyncIterator[bytes],
        close: Callable[[], Awaitable[None]],
    ) -> None:
        self._chunks = chunks
        self._close = close
        self._closed = False

    def __aiter__(self) -> ObjectStream:
        return self

    async def __anext__(self) -> bytes:
        if self._closed:
            raise StopAsyncIteration
        try:
            return await self._chunks.__anext__()
        except BaseException:
            # Exhausted or failed: release the resource right away
            await self.aclose()
            raise

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            close_chunks = getattr(self._chunks, "aclose", None)
            if close_chunks is not None:
                await close_chunks()
        finally:
            await self._close()

    async def read_all(self) -> bytes:
        async with self:
            return b"".join([chunk async for chunk in self])

    async def __aenter__(self) -> ObjectStream:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()


class StorageBackend(ABC):
    """Abstract base class for storage backends."""

    # Short name reported by health checks
    name: str = "abstract"

    # Export policy for records whose object is gone: skip (True) or abort (False)
    skip_missing_on_export: bool = False

    @abstractmethod
    async def write(
        self,
        event_id: str,
        payload: bytes,
        content_type: str,
        original_name: str | None = None,
    ) -> StorageObjectRef:
        """Persist a payload and return its handle.

        The handle is returned only once the object is completely written.

        Args:
            event_id: Owning event; the key is namespaced under it
            payload: Binary content
            content_type: Declared MIME type
            original_name: Client filename; only its extension is used

        Returns:
            StorageObjectRef for the new object

        Raises:
            StorageWriteError: On I/O or network failure
        """
        ...

    @abstractmethod
    async def open_read_stream(self, ref: StorageObjectRef) -> ObjectStream:
        """Open a byte stream for a stored object.

        Raises:
            ObjectNotFoundError: If the object does not exist
            StorageReadError: On any other backend failure
        """
        ...

    @abstractmethod
    async def remove(self, ref: StorageObjectRef) -> None:
        """Delete an object. Best-effort: failures are logged, never raised."""
        ...

    @abstractmethod
    async def exists(self, ref: StorageObjectRef) -> bool:
        """Return True if the object exists.

        Raises:
            StorageReadError: If the backend cannot answer
        """
        ...

    async def close(self) -> None:
        """Release clients held by the backend."""
        return None

    def new_ref(
        self,
        event_id: str,
        content_type: str,
        original_name: str | None = None,
    ) -> StorageObjectRef:
        """Generate a fresh, collision-resistant handle for an event.

        Structure: {event_id}/{unix_ms}-{uuid4}{ext}
        """
        validate_event_id(event_id)
        file_name = f"{int(time.time() * 1000)}-{uuid4()}{safe_extension(original_name)}"
        return StorageObjectRef(
            event_id=event_id,
            key=f"{event_id}/{file_name}",
            content_type=content_type,
        )


def validate_event_id(event_id: str) -> None:
    if not _SAFE_SEGMENT.match(event_id or ""):
        raise ValidationError(f"Invalid event identifier: '{event_id}'")


def safe_extension(original_name: str | None) -> str:
    """Return the extension of a client filename if it is a plain suffix."""
    if not original_name:
        return ""
    # Clients may send Windows-style paths
    basename = original_name.replace("\\", "/").rsplit("/", 1)[-1]
    suffix = PurePosixPath(basename).suffix
    if _SAFE_EXTENSION.match(suffix):
        return suffix
    return ""


def ensure_in_namespace(ref: StorageObjectRef) -> str:
    """Return the file name of a ref, refusing keys outside its event namespace."""
    validate_event_id(ref.event_id)
    prefix = f"{ref.event_id}/"
    if not ref.key.startswith(prefix):
        raise ValidationError(f"Storage key '{ref.key}' is outside event '{ref.event_id}'")
    file_name = ref.key[len(prefix) :]
    if not _SAFE_FILE_NAME.match(file_name):
        raise ValidationError(f"Invalid storage key: '{ref.key}'")
    return file_name


def ref_for_file(event_id: str, file_name: str, content_type: str) -> StorageObjectRef:
    """Build a handle from an event id and bare file name (e.g. from a URL)."""
    ref = StorageObjectRef(event_id=event_id, key=f"{event_id}/{file_name}", content_type=content_type)
    ensure_in_namespace(ref)
    return ref
