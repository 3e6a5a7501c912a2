"""Background refresh of stale cache entries."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class BackgroundRefresher:
    """Fire-and-forget refresh tasks with a per-key in-flight guard.

    Each refresh runs as an independent asyncio task that outlives the
    request which scheduled it. While a refresh for a key is in flight,
    further requests for the same key are dropped. Task failures are
    logged and never propagated.
    """

    def __init__(self) -> None:
        self._in_flight: dict[str, asyncio.Task[None]] = {}

    def schedule(
        self, key: str, refresh: Callable[[], Awaitable[None]]
    ) -> asyncio.Task[None] | None:
        """Start a refresh for the key unless one is already running.

        Args:
            key: Refresh key (one per cached user).
            refresh: Factory returning the refresh coroutine.

        Returns:
            The new task, or None if a refresh was already in flight.
        """
        if key in self._in_flight:
            logger.debug("Refresh already in flight for %s", key)
            return None

        task = asyncio.create_task(self._run(key, refresh), name=f"refresh:{key}")
        self._in_flight[key] = task
        task.add_done_callback(lambda _: self._in_flight.pop(key, None))
        return task

    async def _run(self, key: str, refresh: Callable[[], Awaitable[None]]) -> None:
        try:
            await refresh()
        except asyncio.CancelledError:
            logger.info("Refresh cancelled for %s", key)
            raise
        except Exception:
            logger.exception("Failed to refresh expired cache entry %s", key)

    def is_refreshing(self, key: str) -> bool:
        """Check whether a refresh for the key is in flight."""
        return key in self._in_flight

    @property
    def pending(self) -> int:
        """Number of refreshes in flight."""
        return len(self._in_flight)

    async def wait(self) -> None:
        """Wait for every in-flight refresh to finish."""
        while self._in_flight:
            await asyncio.gather(
                *list(self._in_flight.values()), return_exceptions=True
            )
