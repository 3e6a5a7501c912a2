"""Persistence infrastructure."""

from usercache.infrastructure.persistence.database import DatabaseManager
from usercache.infrastructure.persistence.exceptions import (
    DatabaseError,
    PersistenceError,
)
from usercache.infrastructure.persistence.models import (
    TABLE_PREFIX,
    UserCacheBase,
    table_name,
    user_cache_model,
)
from usercache.infrastructure.persistence.user_cache_repository import (
    SQLUserCacheRepository,
)

__all__ = [
    "TABLE_PREFIX",
    "DatabaseError",
    "DatabaseManager",
    "PersistenceError",
    "SQLUserCacheRepository",
    "UserCacheBase",
    "table_name",
    "user_cache_model",
]
