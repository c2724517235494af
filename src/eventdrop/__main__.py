"""Main entry point for the EventDrop CLI.

Usage:
    python -m eventdrop --help
    eventdrop --help  # If installed via pip/uv
"""

from eventdrop.cli import main

if __name__ == "__main__":
    main()
