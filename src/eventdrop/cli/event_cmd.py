"""CLI command for creating an event.

Usage:
    eventdrop create-event "Graduation 2026"
    eventdrop create-event "Ayse & Mehmet" --date 2026-06-20 --owner Ayse
"""

from __future__ import annotations

import asyncio

import typer

from eventdrop.api.links import admin_url, join_url
from eventdrop.config import settings
from eventdrop.models import Event
from eventdrop.persistence.factory import close_metadata_store, get_metadata_store
from eventdrop.services.factory import get_media_service
from eventdrop.storage.factory import close_storage


def create_event(
    name: str = typer.Argument(..., help="Display name of the event"),
    date: str = typer.Option("", "--date", "-d", help="Event date (free text)"),
    owner: str = typer.Option("", "--owner", "-o", help="Organizer name"),
    base_url: str = typer.Option(
        "",
        "--base-url",
        "-u",
        help="Public base URL for the printed links (defaults to BASE_URL or localhost)",
    ),
) -> None:
    """Create an event and print its guest and admin links."""
    if not name.strip():
        typer.echo("Error: event name is required", err=True)
        raise typer.Exit(code=1)

    event = asyncio.run(_create_event(name, date, owner))
    root = (base_url or settings.base_url or f"http://localhost:{settings.port}").rstrip("/")

    typer.echo(f"Event ID:  {event.id}")
    typer.echo(f"Join URL:  {join_url(root, event.id)}")
    typer.echo(f"Admin URL: {admin_url(root, event)}")


async def _create_event(name: str, date: str, owner: str) -> Event:
    await get_metadata_store().init()
    try:
        return await get_media_service().create_event(name, date, owner)
    finally:
        await close_storage()
        await close_metadata_store()
