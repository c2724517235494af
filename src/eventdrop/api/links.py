"""Absolute links handed to guests and organizers.

Every link resolves to a route registered on the app, so a client can
follow it as-is.
"""

from __future__ import annotations

from urllib.parse import urlencode

from eventdrop.models import Event


def _token_query(event: Event) -> str:
    return urlencode({"token": event.admin_token})


def join_url(root: str, event_id: str) -> str:
    """Public event info guests read before uploading."""
    return f"{root}/api/e/{event_id}"


def admin_url(root: str, event: Event) -> str:
    """Organizer gallery, authorized by the admin secret."""
    return f"{root}/api/admin/{event.id}?{_token_query(event)}"


def download_url(root: str, event: Event) -> str:
    return f"{root}/admin/{event.id}/download.zip?{_token_query(event)}"
