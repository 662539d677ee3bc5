"""Background last-used updates.

Validation never waits for the touch to land; callers that need to observe
``last_used_at`` (tests, graceful shutdown) can ``await drain()``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Set

from ..monitoring.metrics import get_registry

if TYPE_CHECKING:  # pragma: no cover
    from ..tokenstore.store import TokenStore

logger = logging.getLogger(__name__)


class TouchDispatcher:
    """Fire-and-forget scheduler for ``TokenStore.touch_last_used``."""

    def __init__(self):
        self._pending: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def schedule(self, store: "TokenStore", token_id: int) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(self._touch(store, token_id))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _touch(self, store: "TokenStore", token_id: int) -> None:
        try:
            await store.touch_last_used(token_id)
        except Exception as e:
            # token may have been revoked between validate and touch
            logger.debug("Touch of token %s failed: %s", token_id, e)
            get_registry().observe_touch_failure()

    async def drain(self) -> None:
        """Wait for every touch scheduled so far."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


__all__ = ["TouchDispatcher"]
