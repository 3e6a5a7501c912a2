"""Domain entities."""

from usercache.domain.entities.cache_tier import CacheTier, ClearResult
from usercache.domain.entities.cached_user_record import CachedUserRecord
from usercache.domain.entities.platform_user import PlatformStatus, PlatformUser

__all__ = [
    "CacheTier",
    "CachedUserRecord",
    "ClearResult",
    "PlatformStatus",
    "PlatformUser",
]
