"""Tiered read-through cache for platform users."""

import asyncio
import logging
from collections.abc import Iterable
from datetime import timedelta

from usercache.application.services.background_refresh import BackgroundRefresher
from usercache.application.services.middleware import MiddlewarePipeline
from usercache.application.services.user_codec import decode_user, encode_user
from usercache.config.models import CacheConfig
from usercache.domain.entities import CacheTier, ClearResult, PlatformUser
from usercache.domain.exceptions import (
    AdapterInitError,
    AdapterNotInitializedError,
    LiveStateProbeError,
    PersistentStoreUnavailableError,
    RemoteFetchError,
)
from usercache.domain.repositories import (
    FastCache,
    UserCacheRepository,
    fast_cache_key,
)
from usercache.domain.services import Middleware, PlatformAdapter

logger = logging.getLogger(__name__)


class TieredUserCache:
    """Resolve platform users through the cache tiers.

    Tiers are queried in priority order and the first hit wins:

    1. the adapter's live state
    2. the fast cache
    3. the persistent store (stale rows are refreshed in the background)
    4. the platform API

    Every hit except a fast cache hit is written back through the
    middleware pipeline, the persistent store and the fast cache.
    """

    def __init__(
        self,
        fast_cache: FastCache,
        repository: UserCacheRepository,
        config: CacheConfig,
        middlewares: Iterable[Middleware] = (),
    ) -> None:
        """Initialize the cache.

        Args:
            fast_cache: Fast cache tier.
            repository: Persistent cache store.
            config: Cache settings (user expiry).
            middlewares: Write-path middlewares, in order.
        """
        self._fast_cache = fast_cache
        self._repository = repository
        self._config = config
        self._pipeline = MiddlewarePipeline(middlewares)
        self._refresher = BackgroundRefresher()
        self._initializing: dict[int, asyncio.Task[None]] = {}

    @property
    def user_expiry(self) -> timedelta:
        """Persistent row expiry window and fast cache TTL."""
        return self._config.user_expiry

    @property
    def middlewares(self) -> MiddlewarePipeline:
        """Write-path middleware pipeline."""
        return self._pipeline

    async def get_user(self, identity: str, adapter: PlatformAdapter) -> PlatformUser:
        """Resolve a user.

        Args:
            identity: Platform-native identity.
            adapter: Platform adapter to resolve with.

        Returns:
            Resolved user. display_name is never empty.

        Raises:
            InvalidIdentityError: If the identity fails validation.
            AdapterInitError: If adapter initialization fails.
            AdapterNotInitializedError: If the adapter stays uninitialized.
            LiveStateProbeError: If the live-state lookup fails.
            PersistentStoreUnavailableError: If a persistent row cannot be
                read or written.
            RemoteFetchError: If the platform fetch fails.
            MiddlewareError: If a middleware fails. The user is still
                available through the exception.
        """
        user_id = adapter.validate_identity(identity)
        await self._ensure_initialized(adapter)
        platform_name = adapter.name

        # Live state (zero network)
        try:
            resident = await adapter.live_state_probe(user_id)
        except Exception as e:
            raise LiveStateProbeError(
                f"Live state lookup failed for {platform_name}:{user_id}: {e}"
            ) from e

        if resident is not None:
            logger.debug("Live state hit for %s:%s", platform_name, user_id)
            return await self._persist(adapter, resident.with_id(user_id))

        # Fast cache
        cached = await self._read_fast_cache(platform_name, user_id)
        if cached is not None:
            logger.debug("Fast cache hit for %s:%s", platform_name, user_id)
            return cached

        # Persistent store
        try:
            count = await self._repository.count(platform_name, user_id)
        except Exception as e:
            # Never fail a lookup because the cache table is unavailable
            logger.warning(
                "Failed to check internal user cache for %s:%s: %s",
                platform_name,
                user_id,
                e,
            )
            count = 0

        if count > 0:
            try:
                record = await self._repository.find_by_id(platform_name, user_id)
            except Exception as e:
                raise PersistentStoreUnavailableError(
                    f"Failed to read internal user cache for "
                    f"{platform_name}:{user_id}: {e}"
                ) from e

            if record is not None:
                logger.debug("Persistent store hit for %s:%s", platform_name, user_id)
                stale = record.is_stale(self.user_expiry)
                try:
                    return await self._persist(adapter, record.to_platform_user())
                finally:
                    # Scheduled after the write-back so the refresh lands last
                    if stale:
                        self._schedule_refresh(adapter, user_id)

        # Platform API
        return await self._persist(adapter, await self._fetch(adapter, user_id))

    async def clear_user(
        self,
        identity: str,
        adapter: PlatformAdapter,
        tiers: Iterable[CacheTier] = (),
    ) -> ClearResult:
        """Evict a user from the selected cache tiers.

        Args:
            identity: Platform-native identity.
            adapter: Platform adapter the user belongs to.
            tiers: Tiers to clear. Empty means every tier.

        Returns:
            Tiers that held an entry and were cleared.

        Raises:
            InvalidIdentityError: If the identity fails validation.
            AdapterInitError: If adapter initialization fails.
            AdapterNotInitializedError: If the adapter stays uninitialized.
        """
        user_id = adapter.validate_identity(identity)
        await self._ensure_initialized(adapter)
        platform_name = adapter.name
        selected = CacheTier.resolve(tiers)
        cleared: set[CacheTier] = set()

        if CacheTier.PERSISTENT in selected:
            if await self._repository.count(platform_name, user_id) > 0:
                if await self._repository.delete(platform_name, user_id):
                    cleared.add(CacheTier.PERSISTENT)

        if CacheTier.FAST_CACHE in selected:
            if await self._fast_cache.delete(fast_cache_key(platform_name, user_id)):
                cleared.add(CacheTier.FAST_CACHE)

        logger.info(
            "Cleared %s:%s from %s",
            platform_name,
            user_id,
            sorted(tier.value for tier in cleared) or "nothing",
        )
        return ClearResult(cleared_from=frozenset(cleared))

    async def wait_for_background(self) -> None:
        """Wait for in-flight background refreshes to finish."""
        await self._refresher.wait()

    async def close(self) -> None:
        """Drain background work before shutdown."""
        await self.wait_for_background()

    async def _ensure_initialized(self, adapter: PlatformAdapter) -> None:
        if adapter.is_initialized:
            return

        # One initialization per adapter; concurrent first calls share it
        key = id(adapter)
        task = self._initializing.get(key)
        if task is None:
            task = asyncio.create_task(
                self._initialize(adapter), name=f"initialize:{adapter.name}"
            )
            self._initializing[key] = task
            task.add_done_callback(lambda _: self._initializing.pop(key, None))
        await asyncio.shield(task)

    async def _initialize(self, adapter: PlatformAdapter) -> None:
        try:
            await self._repository.ensure_table(adapter.name)
            await adapter.initialize()
        except Exception as e:
            raise AdapterInitError(
                f"Failed to initialize platform {adapter.name}: {e}"
            ) from e

        if not adapter.is_initialized:
            raise AdapterNotInitializedError(
                f"Platform {adapter.name} did not report initialized after initialize()"
            )
        logger.info("Initialized platform %s", adapter.name)

    async def _read_fast_cache(
        self, platform_name: str, user_id: str
    ) -> PlatformUser | None:
        key = fast_cache_key(platform_name, user_id)
        try:
            payload = await self._fast_cache.get(key)
        except Exception as e:
            logger.warning("Failed to read fast cache key %s: %s", key, e)
            return None

        if payload is None:
            return None

        try:
            return decode_user(payload)
        except ValueError as e:
            logger.warning("Ignoring undecodable fast cache entry %s: %s", key, e)
            return None

    async def _fetch(self, adapter: PlatformAdapter, user_id: str) -> PlatformUser:
        try:
            user = await adapter.remote_fetch(user_id)
        except Exception as e:
            raise RemoteFetchError(
                f"Failed to get user {user_id} from {adapter.name}: {e}"
            ) from e
        return user.with_id(user_id)

    async def _persist(
        self, adapter: PlatformAdapter, user: PlatformUser
    ) -> PlatformUser:
        platform_name = adapter.name
        user = await self._pipeline.apply(adapter, user)

        try:
            await self._repository.upsert(platform_name, user)
        except Exception as e:
            raise PersistentStoreUnavailableError(
                f"Failed to update internal user cache for "
                f"{platform_name}:{user.id}: {e}"
            ) from e

        key = fast_cache_key(platform_name, user.id)
        try:
            await self._fast_cache.set(key, encode_user(user), self.user_expiry)
        except Exception as e:
            logger.warning("Failed to write fast cache key %s: %s", key, e)

        return user

    def _schedule_refresh(self, adapter: PlatformAdapter, user_id: str) -> None:
        key = fast_cache_key(adapter.name, user_id)

        async def refresh() -> None:
            logger.info("Updating expired user cache for %s", key)
            user = await self._fetch(adapter, user_id)
            await self._persist(adapter, user)

        self._refresher.schedule(key, refresh)
