"""Liveness endpoint."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from eventdrop.storage.factory import get_storage

router = APIRouter(tags=["health"])


@router.get("/healthz")
async def healthz() -> dict[str, Any]:
    """Report that the process is up and which storage backend it uses."""
    return {"ok": True, "backend": get_storage().name}
