"""Configuration dataclasses."""

from dataclasses import dataclass
from datetime import timedelta

DEFAULT_USER_EXPIRY_SECONDS = 8 * 60 * 60


@dataclass
class DatabaseConfig:
    """Persistent store settings.

    Attributes:
        url: SQLAlchemy async database URL
            (e.g. ``postgresql+asyncpg://...`` or ``sqlite+aiosqlite:///...``).
    """

    url: str


@dataclass
class RedisConfig:
    """Fast cache settings."""

    url: str


@dataclass
class CacheConfig:
    """User cache settings.

    Attributes:
        user_expiry_seconds: Age after which a persistent row is refreshed.
            Also used as the fast cache TTL.
    """

    user_expiry_seconds: int = DEFAULT_USER_EXPIRY_SECONDS

    @property
    def user_expiry(self) -> timedelta:
        return timedelta(seconds=self.user_expiry_seconds)


@dataclass
class DiscordConfig:
    """Discord connection settings."""

    bot_token: str
    preferred_guild_id: int | None = None


@dataclass
class SlackConfig:
    """Slack connection settings."""

    bot_token: str


@dataclass
class LoggingConfig:
    """Logging settings."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    loggers: dict[str, str] | None = None


@dataclass
class Config:
    """Application settings."""

    database: DatabaseConfig
    cache: CacheConfig
    redis: RedisConfig | None = None
    discord: DiscordConfig | None = None
    slack: SlackConfig | None = None
    logging: LoggingConfig | None = None
