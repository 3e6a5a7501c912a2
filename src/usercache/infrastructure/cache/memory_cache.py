"""In-memory implementation of the fast cache."""

import time
from collections.abc import Callable
from datetime import timedelta


class MemoryFastCache:
    """Process-local fast cache with per-key expiry.

    Used when no Redis URL is configured. Expired entries are dropped
    on access and purged on every write.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize.

        Args:
            clock: Monotonic clock in seconds.
        """
        self._clock = clock
        self._entries: dict[str, tuple[bytes, float]] = {}

    async def get(self, key: str) -> bytes | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    async def set(self, key: str, value: bytes, ttl: timedelta) -> None:
        now = self._clock()
        self._purge_expired(now)
        self._entries[key] = (value, now + ttl.total_seconds())

    async def delete(self, key: str) -> bool:
        if await self.get(key) is None:
            return False
        del self._entries[key]
        return True

    def ttl(self, key: str) -> float | None:
        """Seconds until the key expires, or None if absent."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        return max(entry[1] - self._clock(), 0.0)

    def __len__(self) -> int:
        return len(self._entries)

    def _purge_expired(self, now: float) -> None:
        expired = [
            key for key, (_, expires_at) in self._entries.items() if now >= expires_at
        ]
        for key in expired:
            del self._entries[key]
