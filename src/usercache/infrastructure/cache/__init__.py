"""Fast cache infrastructure."""

from usercache.infrastructure.cache.memory_cache import MemoryFastCache
from usercache.infrastructure.cache.redis_cache import RedisFastCache

__all__ = ["MemoryFastCache", "RedisFastCache"]
