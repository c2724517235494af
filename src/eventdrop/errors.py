"""Domain errors for EventDrop.

Every error carries the HTTP status it maps to so the API layer can render
it without knowing which component raised it.
"""

from __future__ import annotations


class EventDropError(Exception):
    """Base class for all EventDrop errors."""

    status_code: int = 500
    code: str = "InternalServerError"

    def __init__(self, text: str):
        self.text = text
        super().__init__(text)


class ValidationError(EventDropError):
    """Request rejected before any side effect (400)."""

    status_code = 400
    code = "BadRequest"


class AuthorizationError(EventDropError):
    """Admin secret missing or wrong (403)."""

    status_code = 403
    code = "Forbidden"

    def __init__(self, text: str = "Unauthorized access"):
        super().__init__(text)


class EventNotFoundError(EventDropError):
    """Event does not exist (404)."""

    status_code = 404
    code = "NotFound"

    def __init__(self, event_id: str):
        self.event_id = event_id
        super().__init__(f"Event with identifier '{event_id}' not found")


class ObjectNotFoundError(EventDropError):
    """Stored object does not exist in the backend (404)."""

    status_code = 404
    code = "NotFound"

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Stored object '{key}' not found")


class NothingToExportError(EventDropError):
    """Event has no uploads to archive (404)."""

    status_code = 404
    code = "NotFound"

    def __init__(self, event_id: str):
        self.event_id = event_id
        super().__init__(f"Event '{event_id}' has no uploads to download")


class StorageWriteError(EventDropError):
    """Backend failed to persist a payload (500)."""

    code = "StorageWriteFailed"


class StorageReadError(EventDropError):
    """Backend failed to deliver a payload (500)."""

    code = "StorageReadFailed"


class MetadataCommitError(EventDropError):
    """Metadata store rejected a commit (500)."""

    code = "MetadataCommitFailed"
