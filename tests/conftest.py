"""Common fixtures."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from doubles import USER_ID, FakeClock, FakePlatformAdapter, create_test_user

from usercache.application.services import TieredUserCache
from usercache.config import CacheConfig
from usercache.infrastructure.cache import MemoryFastCache
from usercache.infrastructure.persistence import (
    DatabaseManager,
    SQLUserCacheRepository,
)


@pytest.fixture
async def db_manager(tmp_path: Path) -> AsyncGenerator[DatabaseManager, None]:
    """File-backed SQLite database manager."""
    manager = DatabaseManager(f"sqlite+aiosqlite:///{tmp_path / 'cache.db'}")
    yield manager
    await manager.close()


@pytest.fixture
def repository(db_manager: DatabaseManager) -> SQLUserCacheRepository:
    """Persistent cache repository."""
    return SQLUserCacheRepository(db_manager.get_session)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fast_cache(clock: FakeClock) -> MemoryFastCache:
    """In-memory fast cache driven by the fake clock."""
    return MemoryFastCache(clock=clock)


@pytest.fixture
def cache_config() -> CacheConfig:
    return CacheConfig(user_expiry_seconds=3600)


@pytest.fixture
def adapter() -> FakePlatformAdapter:
    """Fake adapter that knows the test user remotely."""
    return FakePlatformAdapter(remote_users={USER_ID: create_test_user()})


@pytest.fixture
async def tiered_cache(
    fast_cache: MemoryFastCache,
    repository: SQLUserCacheRepository,
    cache_config: CacheConfig,
) -> AsyncGenerator[TieredUserCache, None]:
    """Tiered cache over SQLite and the in-memory fast cache."""
    cache = TieredUserCache(
        fast_cache=fast_cache,
        repository=repository,
        config=cache_config,
    )
    yield cache
    await cache.close()
