"""CLI command for exporting an event's uploads to a ZIP file.

Usage:
    eventdrop export a1b2c3
    eventdrop export a1b2c3 --output /backups/wedding.zip
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import aiofiles  # type: ignore[import-untyped]
import aiofiles.os  # type: ignore[import-untyped]
import typer

from eventdrop.errors import EventDropError
from eventdrop.persistence.factory import close_metadata_store, get_metadata_store
from eventdrop.services.factory import get_media_service
from eventdrop.storage.factory import close_storage


def export_event(
    event_id: str = typer.Argument(..., help="Event identifier"),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Output path (defaults to the archive's download name)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show verbose output",
    ),
) -> None:
    """Write the archive of an event to disk.

    Uses the same streaming exporter as the download endpoint, so the file
    is written incrementally.
    """
    try:
        path, size = asyncio.run(_export_event(event_id, output))
    except EventDropError as e:
        typer.echo(f"Error: {e.text}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Wrote {path}")
    if verbose:
        typer.echo(f"  Size: {size} bytes")


async def _export_event(event_id: str, output: Path | None) -> tuple[Path, int]:
    """Async implementation of export command."""
    await get_metadata_store().init()
    service = get_media_service()
    try:
        download = await service.export_archive(event_id)
        path = output or Path(download.filename)
        partial = path.with_name(f"{path.name}.part")

        size = 0
        try:
            async with aiofiles.open(partial, "wb") as f:
                async for chunk in download.chunks:
                    await f.write(chunk)
                    size += len(chunk)
        except BaseException:
            await aiofiles.os.remove(partial)
            raise
        await aiofiles.os.replace(partial, path)
        return path, size
    finally:
        await close_storage()
        await close_metadata_store()
