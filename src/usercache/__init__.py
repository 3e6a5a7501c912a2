"""Tiered read-through cache for platform users."""

from usercache.application.services import TieredUserCache
from usercache.domain.entities import (
    CacheTier,
    ClearResult,
    PlatformStatus,
    PlatformUser,
)
from usercache.domain.exceptions import (
    AdapterInitError,
    AdapterNotInitializedError,
    InvalidIdentityError,
    LiveStateProbeError,
    MiddlewareError,
    PersistentStoreUnavailableError,
    RemoteFetchError,
    UserCacheError,
)

__all__ = [
    "AdapterInitError",
    "AdapterNotInitializedError",
    "CacheTier",
    "ClearResult",
    "InvalidIdentityError",
    "LiveStateProbeError",
    "MiddlewareError",
    "PersistentStoreUnavailableError",
    "PlatformStatus",
    "PlatformUser",
    "RemoteFetchError",
    "TieredUserCache",
    "UserCacheError",
]
