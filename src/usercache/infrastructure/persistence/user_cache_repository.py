"""SQL implementation of UserCacheRepository."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from datetime import datetime, timezone

from sqlalchemy import delete, func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.schema import CreateTable
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from usercache.domain.entities import CachedUserRecord, PlatformUser
from usercache.infrastructure.persistence.exceptions import DatabaseError
from usercache.infrastructure.persistence.models import (
    UserCacheBase,
    user_cache_model,
)

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _as_utc(value: datetime) -> datetime:
    # SQLite drops the offset; stored values are always UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SQLUserCacheRepository:
    """SQL implementation of UserCacheRepository.

    Stores each platform's users in its own ``internal_user_cache__<platform>``
    table. Upserts use ``INSERT ... ON CONFLICT (id) DO UPDATE`` so a row
    is always replaced in a single statement.
    """

    def __init__(
        self,
        session_factory: Callable[[], AbstractAsyncContextManager[AsyncSession]],
    ) -> None:
        """Initialize.

        Args:
            session_factory: Async session factory.
        """
        self._session_factory = session_factory

    async def ensure_table(self, platform_name: str) -> None:
        """Create the platform's cache table if it does not exist.

        Issues ``CREATE TABLE IF NOT EXISTS`` and is safe to call
        concurrently.

        Args:
            platform_name: Adapter name.

        Raises:
            DatabaseError: If the table cannot be created.
        """
        model = user_cache_model(platform_name)
        try:
            async with self._session_factory() as session:
                conn = await session.connection()
                await conn.execute(CreateTable(model.__table__, if_not_exists=True))
                await session.commit()
        except SQLAlchemyError as e:
            raise DatabaseError(
                f"Failed to create table {model.__tablename__}: {e}"
            ) from e

    async def count(self, platform_name: str, user_id: str) -> int:
        """Count rows with the given ID.

        Args:
            platform_name: Adapter name.
            user_id: User ID.

        Returns:
            Number of matching rows (0 or 1).
        """
        model = user_cache_model(platform_name)
        statement = select(func.count()).select_from(model).where(model.id == user_id)
        try:
            async with self._session_factory() as session:
                result = await session.exec(statement)
                return int(result.one())
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to count user {user_id}: {e}") from e

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
        model = user_cache_model(platform_name)
        try:
            async with self._session_factory() as session:
                result = await session.exec(select(model).where(model.id == user_id))
                row = result.first()
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to find user {user_id}: {e}") from e

        if row is None:
            return None
        return self._to_entity(row)

    async def upsert(
        self,
        platform_name: str,
        user: PlatformUser,
        *,
        now: datetime | None = None,
    ) -> None:
        """Insert the user or update its mutable fields and last_updated.

        Args:
            platform_name: Adapter name.
            user: User to persist. extra_data, status and flags are dropped.
            now: Timestamp to record (defaults to now in UTC).
        """
        table = user_cache_model(platform_name).__table__
        timestamp = _as_utc(now) if now is not None else datetime.now(timezone.utc)
        try:
            async with self._session_factory() as session:
                conn = await session.connection()
                insert = _UPSERT_DIALECTS.get(conn.dialect.name)
                if insert is None:
                    raise DatabaseError(
                        f"Upsert is not supported on dialect {conn.dialect.name}"
                    )
                statement = insert(table).values(
                    id=user.id,
                    username=user.username,
                    display_name=user.display_name,
                    avatar=user.avatar,
                    bot=user.bot,
                    created_at=timestamp,
                    last_updated=timestamp,
                )
                statement = statement.on_conflict_do_update(
                    index_elements=["id"],
                    set_={
                        "username": statement.excluded.username,
                        "display_name": statement.excluded.display_name,
                        "avatar": statement.excluded.avatar,
                        "bot": statement.excluded.bot,
                        "last_updated": statement.excluded.last_updated,
                    },
                )
                await session.exec(statement)
                await session.commit()
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to upsert user {user.id}: {e}") from e

    async def delete(self, platform_name: str, user_id: str) -> bool:
        """Delete a row by ID.

        Args:
            platform_name: Adapter name.
            user_id: User ID.

        Returns:
            True if a row was deleted.
        """
        table = user_cache_model(platform_name).__table__
        try:
            async with self._session_factory() as session:
                result = await session.exec(delete(table).where(table.c.id == user_id))
                await session.commit()
                return result.rowcount > 0
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to delete user {user_id}: {e}") from e

    def _to_entity(self, model: UserCacheBase) -> CachedUserRecord:
        """Convert a table row to a CachedUserRecord."""
        return CachedUserRecord(
            id=model.id,
            username=model.username,
            display_name=model.display_name,
            avatar=model.avatar,
            bot=model.bot,
            created_at=_as_utc(model.created_at),
            last_updated=_as_utc(model.last_updated),
        )
