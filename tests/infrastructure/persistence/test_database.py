"""Tests for DatabaseManager."""

from pathlib import Path

from sqlalchemy import text

from usercache.infrastructure.persistence import DatabaseManager


class TestDatabaseManager:
    """DatabaseManager tests."""

    def test_get_engine_with_sqlite_url(self, tmp_path: Path) -> None:
        manager = DatabaseManager(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")

        engine = manager.get_engine()

        assert engine.url.get_backend_name() == "sqlite"
        assert manager.get_engine() is engine

    def test_get_engine_creates_parent_directory(self, tmp_path: Path) -> None:
        """Test that parent directory is created if not exists."""
        db_path = tmp_path / "subdir" / "nested" / "test.db"
        manager = DatabaseManager(f"sqlite+aiosqlite:///{db_path}")

        manager.get_engine()

        assert db_path.parent.exists()

    def test_in_memory_database_needs_no_directory(self) -> None:
        manager = DatabaseManager("sqlite+aiosqlite:///:memory:")

        engine = manager.get_engine()

        assert engine.url.database == ":memory:"

    async def test_get_session(self, tmp_path: Path) -> None:
        manager = DatabaseManager(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")

        async with manager.get_session() as session:
            result = await session.exec(text("SELECT 1"))  # type: ignore[call-overload]
            assert result.scalar() == 1

        await manager.close()

    async def test_close_resets_engine(self, tmp_path: Path) -> None:
        manager = DatabaseManager(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
        engine = manager.get_engine()

        await manager.close()

        assert manager.get_engine() is not engine
        await manager.close()
