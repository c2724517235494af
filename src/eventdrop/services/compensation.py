"""Compensating actions for multi-step operations without a shared transaction.

The blob store and the metadata store cannot commit together, so each side
effect that succeeds registers an undo action here. If a later step fails,
the undo actions run newest first. An undo that fails is logged and the
rest still run; the caller's original error is what surfaces.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class UndoAction:
    description: str
    action: Callable[[], Awaitable[object]]


class CompensationLog:
    """Ordered list of undo actions, executed in reverse."""

    def __init__(self) -> None:
        self._actions: list[UndoAction] = []

    def __len__(self) -> int:
        return len(self._actions)

    def add(self, description: str, action: Callable[[], Awaitable[object]]) -> None:
        self._actions.append(UndoAction(description, action))

    async def run(self) -> int:
        """Execute all undo actions newest first.

        Returns:
            Number of undo actions that failed
        """
        failures = 0
        while self._actions:
            undo = self._actions.pop()
            try:
                await undo.action()
            except Exception:
                failures += 1
                logger.exception(f"Compensation failed: {undo.description}")
        if failures:
            logger.error(f"{failures} compensation action(s) failed; orphaned objects may remain")
        return failures
