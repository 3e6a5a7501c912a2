"""Persistent user cache repository protocol."""

from typing import Protocol

from usercache.domain.entities import CachedUserRecord, PlatformUser


class UserCacheRepository(Protocol):
    """Durable per-platform user cache.

    Each platform owns one table, addressed by the adapter name.
    Rows are replaced through a single upsert and never mutated
    field by field.
    """

    async def ensure_table(self, platform_name: str) -> None:
        """Create the platform's cache table if it does not exist.

        Args:
            platform_name: Adapter name.
        """
        ...

    async def count(self, platform_name: str, user_id: str) -> int:
        """Count rows with the given ID (0 or 1).

        Args:
            platform_name: Adapter name.
            user_id: User ID.

        Returns:
            Number of matching rows.
        """
        ...

    async def find_by_id(
        self, platform_name: str, user_id: str
    ) -> CachedUserRecord | None:
        """Find a row by ID.

        Args:
            platform_name: Adapter name.
            user_id: User ID.

        Returns:
            The row, or None if absent.
        """
        ...

    async def upsert(self, platform_name: str, user: PlatformUser) -> None:
        """Insert the user or update every mutable field and last_updated.

        Args:
            platform_name: Adapter name.
            user: User to persist. extra_data is not stored.
        """
        ...

    async def delete(self, platform_name: str, user_id: str) -> bool:
        """Delete a row by ID.

        Args:
            platform_name: Adapter name.
            user_id: User ID.

        Returns:
            True if a row was deleted.
        """
        ...
