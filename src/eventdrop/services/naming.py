"""Filename sanitization for archive entries and download names."""

from __future__ import annotations

import posixpath
import re
import unicodedata

from eventdrop.models import UploadRecord

PLACEHOLDER_NAME = "archive"
MAX_NAME_LENGTH = 80

EXTENSIONS_BY_CONTENT_TYPE = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/heic": ".heic",
    "image/heif": ".heif",
    "image/gif": ".gif",
    "video/mp4": ".mp4",
    "video/quicktime": ".mov",
    "video/webm": ".webm",
}

_NON_ASCII = re.compile(r"[^\x00-\x7F]")
_UNSAFE_RUN = re.compile(r"[^A-Za-z0-9._-]+")
_DASH_RUN = re.compile(r"-+")


def sanitize_archive_name(value: str | None, placeholder: str = PLACEHOLDER_NAME) -> str:
    """Reduce a name to ASCII [A-Za-z0-9._-], at most 80 characters.

    >>> sanitize_archive_name("Düğün Fotoğrafları 2024")
    'Dugun-Fotograflar-2024'
    """
    if not isinstance(value, str):
        return placeholder

    safe = unicodedata.normalize("NFKD", value)
    safe = _NON_ASCII.sub("", safe)
    safe = _UNSAFE_RUN.sub("-", safe)
    safe = _DASH_RUN.sub("-", safe)
    safe = safe.strip("-")[:MAX_NAME_LENGTH]
    return safe or placeholder


def extension_for_content_type(content_type: str | None) -> str:
    return EXTENSIONS_BY_CONTENT_TYPE.get(content_type or "", "")


def build_entry_name(record: UploadRecord, index: int) -> str:
    """Archive entry name for the record at 0-based position ``index``.

    The 3-digit position prefix keeps names unique within one archive even
    when guests upload files with identical names.
    """
    prefix = f"{index + 1:03d}"
    original = record.original_name or posixpath.basename(record.storage_path or "")
    safe_name = sanitize_archive_name(original)

    if posixpath.splitext(safe_name)[1]:
        return f"{prefix}-{safe_name}"

    fallback_ext = posixpath.splitext(record.storage_path or "")[1] or extension_for_content_type(
        record.content_type
    )
    return f"{prefix}-{safe_name}{fallback_ext}"


def archive_filename(event_name: str | None, event_id: str) -> str:
    """Download name of an event's archive."""
    return f"{sanitize_archive_name(event_name or 'memories')}-{event_id}.zip"
