"""Fast cache port."""

from datetime import timedelta
from typing import Protocol

USER_KEY_PREFIX = "uobj__"


def fast_cache_key(platform_name: str, identity: str) -> str:
    """Build the fast cache key for a platform user.

    Args:
        platform_name: Adapter name.
        identity: Normalized user identity.

    Returns:
        Key in the form ``uobj__<platform>:<identity>``.
    """
    return f"{USER_KEY_PREFIX}{platform_name}:{identity}"


class FastCache(Protocol):
    """Low-latency key-value store with per-key TTL.

    Values are opaque bytes and are always replaced wholesale.
    """

    async def get(self, key: str) -> bytes | None:
        """Get a value.

        Args:
            key: Cache key.

        Returns:
            Stored bytes, or None if absent or expired.
        """
        ...

    async def set(self, key: str, value: bytes, ttl: timedelta) -> None:
        """Store a value with an expiry.

        Args:
            key: Cache key.
            value: Encoded value.
            ttl: Time to live.
        """
        ...

    async def delete(self, key: str) -> bool:
        """Delete a value.

        Args:
            key: Cache key.

        Returns:
            True if an entry existed.
        """
        ...
