"""
Request deduplication: concurrent callers asking for the same key share one
in-flight fetch instead of each issuing their own.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict

logger = logging.getLogger(__name__)


class RequestDeduplicator:
    def __init__(self) -> None:
        self._pending: Dict[str, asyncio.Future] = {}

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def is_pending(self, key: str) -> bool:
        return key in self._pending

    async def run(self, key: str, fetcher: Callable[[], Awaitable[Any]]) -> Any:
        """
        Await the in-flight request for ``key`` or start ``fetcher()`` as one.

        Every waiter gets the same result or the same exception. The key is
        released as soon as the request settles, so the next call after that
        starts a fresh fetch. A cancelled waiter does not cancel the shared
        request for the others.
        """
        task = self._pending.get(key)
        if task is None:
            task = asyncio.ensure_future(fetcher())
            self._pending[key] = task
            task.add_done_callback(lambda done, k=key: self._release(k, done))
        else:
            logger.debug("Joining in-flight request for %s", key)
        return await asyncio.shield(task)

    def _release(self, key: str, task: asyncio.Future) -> None:
        if self._pending.get(key) is task:
            del self._pending[key]
        # Retrieve the exception so an unawaited failure is not reported as never retrieved.
        if not task.cancelled():
            task.exception()
