"""Tests for the command line entry point."""

import json
import logging
from collections.abc import AsyncGenerator, Generator
from contextlib import asynccontextmanager
from pathlib import Path
from unittest.mock import patch

import pytest
from doubles import USER_ID, FakePlatformAdapter, create_test_user

from usercache.__main__ import (
    build_parser,
    configure_logging,
    create_fast_cache,
    run,
    run_command,
)
from usercache.application.services import TieredUserCache
from usercache.config import (
    CacheConfig,
    Config,
    DatabaseConfig,
    LoggingConfig,
    RedisConfig,
)
from usercache.infrastructure.cache import MemoryFastCache
from usercache.infrastructure.persistence import DatabaseManager


@pytest.fixture
def config(tmp_path: Path) -> Config:
    return Config(
        database=DatabaseConfig(url=f"sqlite+aiosqlite:///{tmp_path / 'cache.db'}"),
        cache=CacheConfig(),
    )


@pytest.fixture
def fake_adapter() -> Generator[FakePlatformAdapter, None, None]:
    """Patch open_adapter to yield an in-memory platform."""
    adapter = FakePlatformAdapter(remote_users={USER_ID: create_test_user()})

    @asynccontextmanager
    async def open_fake(
        config: Config, platform: str
    ) -> AsyncGenerator[FakePlatformAdapter, None]:
        yield adapter

    with patch("usercache.__main__.open_adapter", open_fake):
        yield adapter


@pytest.fixture
def restore_logging() -> Generator[None, None, None]:
    root_logger = logging.getLogger()
    discord_logger = logging.getLogger("discord")
    root_level, discord_level = root_logger.level, discord_logger.level
    yield
    root_logger.setLevel(root_level)
    discord_logger.setLevel(discord_level)


class TestBuildParser:
    """build_parser tests."""

    def test_get(self) -> None:
        args = build_parser().parse_args(["get", "discord", USER_ID])

        assert args.command == "get"
        assert args.platform == "discord"
        assert args.identity == USER_ID
        assert args.config == Path("config.yaml")

    def test_clear_with_tiers(self) -> None:
        args = build_parser().parse_args(
            [
                "--config",
                "other.yaml",
                "clear",
                "slack",
                "U012AB3CD",
                "--tier",
                "fast_cache",
            ]
        )

        assert args.command == "clear"
        assert args.tier == ["fast_cache"]
        assert args.config == Path("other.yaml")

    def test_clear_defaults_to_all_tiers(self) -> None:
        args = build_parser().parse_args(["clear", "discord", USER_ID])

        assert args.tier == []

    def test_rejects_unknown_platform(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["get", "irc", "nick"])


class TestConfigureLogging:
    """configure_logging tests."""

    def test_none_is_noop(self, restore_logging: None) -> None:
        level = logging.getLogger().level

        configure_logging(None)

        assert logging.getLogger().level == level

    def test_sets_levels(self, restore_logging: None) -> None:
        configure_logging(LoggingConfig(level="debug", loggers={"discord": "warning"}))

        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("discord").level == logging.WARNING


class TestCreateFastCache:
    """create_fast_cache tests."""

    def test_memory_without_redis(self, config: Config) -> None:
        assert isinstance(create_fast_cache(config), MemoryFastCache)

    def test_redis(self, config: Config) -> None:
        config.redis = RedisConfig(url="redis://localhost:6379/0")

        with patch("usercache.__main__.RedisFastCache.from_url") as from_url:
            fast_cache = create_fast_cache(config)

        from_url.assert_called_once_with("redis://localhost:6379/0")
        assert fast_cache is from_url.return_value


class TestRunCommand:
    """run_command tests."""

    async def test_get_prints_user(
        self,
        config: Config,
        fake_adapter: FakePlatformAdapter,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        args = build_parser().parse_args(["get", "discord", USER_ID])

        exit_code = await run_command(args, config)

        assert exit_code == 0
        output = json.loads(capsys.readouterr().out)
        assert output["id"] == USER_ID
        assert output["username"] == "ada"
        assert fake_adapter.fetch_calls == [USER_ID]

    async def test_clear_prints_cleared_tiers(
        self,
        config: Config,
        fake_adapter: FakePlatformAdapter,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        get_args = build_parser().parse_args(["get", "discord", USER_ID])
        await run_command(get_args, config)
        capsys.readouterr()

        args = build_parser().parse_args(
            ["clear", "discord", USER_ID, "--tier", "persistent"]
        )
        exit_code = await run_command(args, config)

        assert exit_code == 0
        assert json.loads(capsys.readouterr().out) == ["persistent"]

    async def test_drains_background_work_before_closing_store(
        self,
        config: Config,
        fake_adapter: FakePlatformAdapter,
    ) -> None:
        """Test shutdown order when resolution fails."""
        calls: list[str] = []
        fake_adapter.fetch_error = ConnectionError("platform unreachable")
        close_cache = TieredUserCache.close
        close_database = DatabaseManager.close

        async def record_cache_close(cache: TieredUserCache) -> None:
            calls.append("cache")
            await close_cache(cache)

        async def record_database_close(manager: DatabaseManager) -> None:
            calls.append("database")
            await close_database(manager)

        args = build_parser().parse_args(["get", "discord", USER_ID])
        with (
            patch.object(TieredUserCache, "close", record_cache_close),
            patch.object(DatabaseManager, "close", record_database_close),
        ):
            exit_code = await run_command(args, config)

        assert exit_code == 1
        assert calls == ["cache", "database"]

    async def test_invalid_identity_fails(
        self,
        config: Config,
        fake_adapter: FakePlatformAdapter,
    ) -> None:
        args = build_parser().parse_args(["get", "discord", "12"])

        assert await run_command(args, config) == 1
        assert fake_adapter.fetch_calls == []


class TestRun:
    """run tests."""

    def test_missing_config_exits(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            run(["--config", str(tmp_path / "missing.yaml"), "get", "discord", USER_ID])

        assert exc_info.value.code == 1
