"""CLI commands for EventDrop.

Provides command-line interface using Typer:
- eventdrop serve: Run the API server
- eventdrop create-event: Create an event and print its links
- eventdrop export: Write an event's archive to disk

Usage:
    eventdrop --help
    eventdrop serve --port 3000
    eventdrop create-event "Ayse & Mehmet" --date 2026-06-20
    eventdrop export a1b2c3 --output wedding.zip
"""

import typer

from eventdrop.cli.event_cmd import create_event
from eventdrop.cli.export_cmd import export_event
from eventdrop.cli.serve import serve

# Main CLI application
app = typer.Typer(
    name="eventdrop",
    help="EventDrop: collect event photos and videos from guests",
    no_args_is_help=True,
)

app.command(name="serve")(serve)
app.command(name="create-event")(create_event)
app.command(name="export")(export_event)


@app.callback()
def callback() -> None:
    """EventDrop: collect event photos and videos from guests."""
    pass


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
