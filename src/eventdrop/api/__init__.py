"""HTTP API for EventDrop."""
