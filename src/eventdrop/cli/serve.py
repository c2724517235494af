"""CLI command for running the API server.

Usage:
    eventdrop serve
    eventdrop serve --port 3000 --host 0.0.0.0
    eventdrop serve --reload --log-level debug
"""

from __future__ import annotations

import typer

from eventdrop.config import settings


def serve(
    host: str = typer.Option(
        settings.host,
        "--host",
        "-h",
        help="Host to bind to",
    ),
    port: int = typer.Option(
        settings.port,
        "--port",
        "-p",
        help="Port to listen on",
    ),
    reload: bool = typer.Option(
        False,
        "--reload",
        "-r",
        help="Enable auto-reload for development",
    ),
    log_level: str = typer.Option(
        "info",
        "--log-level",
        "-l",
        help="Log level: debug, info, warning, error",
    ),
) -> None:
    """Run the EventDrop API server.

    The server runs a single worker: the JSON metadata store serializes
    writes within one process only.
    """
    import uvicorn

    typer.echo("Starting EventDrop server...")
    typer.echo(f"  Host: {host}")
    typer.echo(f"  Port: {port}")
    typer.echo(f"  Storage: {settings.storage_backend}")
    typer.echo(f"  Metadata: {settings.metadata_backend}")
    if reload:
        typer.echo("  Reload: enabled")
    typer.echo()

    uvicorn.run(
        app="eventdrop.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=log_level.lower(),
    )
