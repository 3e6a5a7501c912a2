"""Tests for RedisFastCache."""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from usercache.infrastructure.cache import RedisFastCache


@pytest.fixture
def client() -> MagicMock:
    """Mock redis.asyncio client."""
    client = MagicMock()
    client.get = AsyncMock(return_value=None)
    client.set = AsyncMock(return_value=True)
    client.delete = AsyncMock(return_value=0)
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def cache(client: MagicMock) -> RedisFastCache:
    return RedisFastCache(client)


class TestGet:
    """get method tests."""

    async def test_missing_key(self, cache: RedisFastCache, client: MagicMock) -> None:
        assert await cache.get("uobj__discord:1") is None
        client.get.assert_awaited_once_with("uobj__discord:1")

    async def test_returns_bytes(
        self, cache: RedisFastCache, client: MagicMock
    ) -> None:
        client.get.return_value = b'{"id":"1"}'

        assert await cache.get("uobj__discord:1") == b'{"id":"1"}'

    async def test_decoded_responses_are_encoded(
        self, cache: RedisFastCache, client: MagicMock
    ) -> None:
        """Test clients created with decode_responses=True."""
        client.get.return_value = '{"name":"Zoë"}'

        assert await cache.get("k") == '{"name":"Zoë"}'.encode()


class TestSet:
    """set method tests."""

    async def test_sets_millisecond_expiry(
        self, cache: RedisFastCache, client: MagicMock
    ) -> None:
        await cache.set("uobj__discord:1", b"payload", timedelta(hours=1))

        client.set.assert_awaited_once_with(
            "uobj__discord:1", b"payload", px=3_600_000
        )

    async def test_sub_millisecond_ttl_is_rounded_up(
        self, cache: RedisFastCache, client: MagicMock
    ) -> None:
        await cache.set("k", b"v", timedelta(microseconds=10))

        client.set.assert_awaited_once_with("k", b"v", px=1)


class TestDelete:
    """delete method tests."""

    async def test_deleted(self, cache: RedisFastCache, client: MagicMock) -> None:
        client.delete.return_value = 1

        assert await cache.delete("k") is True
        client.delete.assert_awaited_once_with("k")

    async def test_missing(self, cache: RedisFastCache) -> None:
        assert await cache.delete("k") is False


class TestLifecycle:
    """Construction and shutdown tests."""

    async def test_close(self, cache: RedisFastCache, client: MagicMock) -> None:
        await cache.close()

        client.aclose.assert_awaited_once()

    def test_from_url(self) -> None:
        with patch(
            "usercache.infrastructure.cache.redis_cache.Redis.from_url"
        ) as from_url:
            cache = RedisFastCache.from_url("redis://localhost:6379/0")

        from_url.assert_called_once_with("redis://localhost:6379/0")
        assert cache._client is from_url.return_value
