"""Command line entry point."""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

import discord
from slack_sdk.web.async_client import AsyncWebClient

from usercache.application.services import TieredUserCache
from usercache.config import Config, ConfigError, LoggingConfig, load_config
from usercache.domain.entities import CacheTier
from usercache.domain.exceptions import UserCacheError
from usercache.domain.repositories import FastCache
from usercache.domain.services import PlatformAdapter
from usercache.infrastructure.cache import MemoryFastCache, RedisFastCache
from usercache.infrastructure.persistence import DatabaseManager, SQLUserCacheRepository
from usercache.infrastructure.platforms import (
    DiscordPlatformAdapter,
    SlackPlatformAdapter,
)

# Default logging for early startup
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

PLATFORMS = ("discord", "slack")


def configure_logging(config: LoggingConfig | None) -> None:
    """Configure logging based on config.

    Args:
        config: Logging configuration. If None, uses defaults.
    """
    if config is None:
        return

    # Get root logger
    root_logger = logging.getLogger()

    # Set root level
    level = getattr(logging, config.level.upper(), logging.INFO)
    root_logger.setLevel(level)

    # Update handler format if specified
    if root_logger.handlers:
        formatter = logging.Formatter(config.format)
        for handler in root_logger.handlers:
            handler.setFormatter(formatter)

    # Configure individual loggers
    if config.loggers:
        for logger_name, logger_level in config.loggers.items():
            individual_logger = logging.getLogger(logger_name)
            individual_level = getattr(logging, logger_level.upper(), logging.INFO)
            individual_logger.setLevel(individual_level)
            logger.debug(
                "Set logger '%s' to level %s", logger_name, logger_level.upper()
            )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="usercache", description="Resolve and invalidate cached platform users"
    )
    parser.add_argument(
        "--config", type=Path, default=Path("config.yaml"), help="config file path"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    get_parser = subparsers.add_parser("get", help="resolve a user")
    get_parser.add_argument("platform", choices=PLATFORMS)
    get_parser.add_argument("identity")

    clear_parser = subparsers.add_parser("clear", help="evict a user from the cache")
    clear_parser.add_argument("platform", choices=PLATFORMS)
    clear_parser.add_argument("identity")
    clear_parser.add_argument(
        "--tier",
        action="append",
        choices=[tier.value for tier in CacheTier],
        default=[],
        help="tier to clear (repeatable, default: all)",
    )
    return parser


def create_fast_cache(config: Config) -> FastCache:
    """Create the fast cache selected by the config."""
    if config.redis is None:
        logger.warning("No redis.url configured, using in-memory fast cache")
        return MemoryFastCache()
    return RedisFastCache.from_url(config.redis.url)


@asynccontextmanager
async def open_adapter(
    config: Config, platform: str
) -> AsyncGenerator[PlatformAdapter, None]:
    """Create a connected platform adapter.

    Raises:
        ConfigError: If the platform has no config section.
    """
    if platform == "discord":
        if config.discord is None:
            raise ConfigError("The 'discord' section is required for discord lookups")
        client = discord.Client(intents=discord.Intents.default())
        try:
            await client.login(config.discord.bot_token)
        except discord.LoginFailure as e:
            await client.close()
            raise ConfigError(f"Discord login failed: {e}") from e
        try:
            yield DiscordPlatformAdapter(client, config.discord.preferred_guild_id)
        finally:
            await client.close()
    else:
        if config.slack is None:
            raise ConfigError("The 'slack' section is required for slack lookups")
        yield SlackPlatformAdapter(AsyncWebClient(token=config.slack.bot_token))


async def run_command(args: argparse.Namespace, config: Config) -> int:
    """Run a parsed command.

    Returns:
        Process exit code.
    """
    db_manager = DatabaseManager(config.database.url)
    fast_cache = create_fast_cache(config)
    cache = TieredUserCache(
        fast_cache=fast_cache,
        repository=SQLUserCacheRepository(db_manager.get_session),
        config=config.cache,
    )

    try:
        async with open_adapter(config, args.platform) as adapter:
            try:
                if args.command == "get":
                    user = await cache.get_user(args.identity, adapter)
                    print(json.dumps(user.to_dict(), indent=2, ensure_ascii=False))
                else:
                    result = await cache.clear_user(
                        args.identity,
                        adapter,
                        [CacheTier(tier) for tier in args.tier],
                    )
                    cleared = sorted(tier.value for tier in result.cleared_from)
                    print(json.dumps(cleared))
            finally:
                # Refreshes need the adapter, the store and the fast cache
                await cache.close()
    except UserCacheError as e:
        logger.error("%s", e)
        return 1
    finally:
        if isinstance(fast_cache, RedisFastCache):
            await fast_cache.close()
        await db_manager.close()

    return 0


def run(argv: list[str] | None = None) -> None:
    """Parse arguments and run the command."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except (ConfigError, FileNotFoundError) as e:
        logger.error("Failed to load config: %s", e)
        sys.exit(1)

    configure_logging(config.logging)

    try:
        exit_code = asyncio.run(run_command(args, config))
    except ConfigError as e:
        logger.error("%s", e)
        exit_code = 1
    except KeyboardInterrupt:
        logger.info("Interrupted")
        exit_code = 1
    sys.exit(exit_code)


if __name__ == "__main__":
    run()
