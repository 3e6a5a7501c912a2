"""Domain repositories."""

from usercache.domain.repositories.fast_cache import (
    USER_KEY_PREFIX,
    FastCache,
    fast_cache_key,
)
from usercache.domain.repositories.user_cache_repository import UserCacheRepository

__all__ = [
    "USER_KEY_PREFIX",
    "FastCache",
    "UserCacheRepository",
    "fast_cache_key",
]
