"""EventDrop: collect event photos and videos from guests, download them in bulk."""

__version__ = "0.1.0"
