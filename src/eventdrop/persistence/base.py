"""Metadata store interface.

The metadata store is the source of truth for which events exist and what
was uploaded to them. Binary content never passes through it.
"""

from __future__ import annotations

import secrets
from abc import ABC, abstractmethod
from collections.abc import Sequence

from eventdrop.models import Event, UploadRecord


def generate_event_id() -> str:
    """Short, URL-friendly event identifier (6 hex chars)."""
    return secrets.token_hex(3)


def generate_admin_token() -> str:
    return secrets.token_hex(16)


class MetadataStore(ABC):
    """Abstract base class for metadata stores."""

    async def init(self) -> None:
        """Prepare the store (create files/tables). Idempotent."""
        return None

    async def close(self) -> None:
        return None

    @abstractmethod
    async def create_event(self, name: str, date: str = "", owner_name: str = "") -> Event:
        """Create an event with a fresh, unused short id and admin token."""
        ...

    @abstractmethod
    async def find_event(self, event_id: str) -> Event | None:
        """Return the event or None if it does not exist."""
        ...

    @abstractmethod
    async def commit_uploads(self, records: Sequence[UploadRecord]) -> None:
        """Persist all records as one unit.

        Raises:
            MetadataCommitError: If nothing could be persisted
        """
        ...

    @abstractmethod
    async def list_uploads(self, event_id: str) -> list[UploadRecord]:
        """Return the event's uploads, newest first."""
        ...
