"""Redis implementation of the fast cache."""

from datetime import timedelta

from redis.asyncio import Redis


class RedisFastCache:
    """Fast cache backed by Redis.

    Values are stored as plain strings with a millisecond expiry.
    """

    def __init__(self, client: Redis) -> None:
        """Initialize.

        Args:
            client: Redis asyncio client.
        """
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisFastCache":
        """Create a cache connected to the given Redis URL."""
        return cls(Redis.from_url(url))

    async def get(self, key: str) -> bytes | None:
        value = await self._client.get(key)
        if value is None:
            return None
        if isinstance(value, str):
            return value.encode("utf-8")
        return value

    async def set(self, key: str, value: bytes, ttl: timedelta) -> None:
        await self._client.set(key, value, px=max(int(ttl.total_seconds() * 1000), 1))

    async def delete(self, key: str) -> bool:
        return await self._client.delete(key) > 0

    async def close(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()
