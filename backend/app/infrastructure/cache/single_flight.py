"""
Single-flight coalescing.

At most one in-flight computation per key: concurrent callers for the same
key await the leader's task instead of starting their own.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Tuple

logger = logging.getLogger(__name__)


class SingleFlight:
    """
    Per-key in-flight task registry.

    The computation runs as its own task and callers await it through
    asyncio.shield, so a cancelled caller does not cancel work that other
    waiters (or the cache write-through) still depend on.
    """

    def __init__(self):
        self._in_flight: Dict[str, asyncio.Task] = {}

    @property
    def in_flight_count(self) -> int:
        return len(self._in_flight)

    async def do(
        self,
        key: str,
        factory: Callable[[], Awaitable[Any]],
    ) -> Tuple[Any, bool]:
        """
        Run factory() once per key among concurrent callers.

        Returns (result, is_leader). Exceptions from the computation are
        re-raised to every caller.
        """
        task = self._in_flight.get(key)
        is_leader = task is None
        if is_leader:
            task = asyncio.ensure_future(factory())
            self._in_flight[key] = task
            task.add_done_callback(lambda done: self._release(key, done))
        else:
            logger.debug(f"[SINGLE-FLIGHT] Joining in-flight computation for {key}")

        result = await asyncio.shield(task)
        return result, is_leader

    def _release(self, key: str, task: asyncio.Task) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
        # Mark the exception retrieved when every caller has gone away
        if not task.cancelled() and task.exception() is not None:
            logger.debug(f"[SINGLE-FLIGHT] Computation for {key} failed: {task.exception()}")
