"""API routers for EventDrop."""
