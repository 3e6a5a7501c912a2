"""Database management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel.ext.asyncio.session import AsyncSession


class DatabaseManager:
    """Database management.

    Owns the async engine and session factory for the persistent cache.
    Works with SQLite (aiosqlite) and PostgreSQL (asyncpg).
    """

    def __init__(self, database_url: str) -> None:
        """Initialize.

        Args:
            database_url: SQLAlchemy async database URL.
        """
        self._database_url = database_url
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    def get_engine(self) -> AsyncEngine:
        """Get the async engine.

        The engine is created lazily and cached. For file-based SQLite
        databases the parent directory is created if missing.

        Returns:
            AsyncEngine instance.
        """
        if self._engine is not None:
            return self._engine

        url = make_url(self._database_url)
        is_file = url.database not in (None, "", ":memory:")
        if url.get_backend_name() == "sqlite" and is_file:
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)

        self._engine = create_async_engine(url)
        self._session_factory = async_sessionmaker(
            self._engine, class_=AsyncSession, expire_on_commit=False
        )
        return self._engine

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get a session (async context manager).

        Yields:
            AsyncSession instance.
        """
        self.get_engine()  # Ensures _session_factory is initialized
        assert self._session_factory is not None
        async with self._session_factory() as session:
            yield session

    async def close(self) -> None:
        """Dispose of the engine and its connections."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
