"""YAML config loading with environment variable expansion."""

import os
import re
from pathlib import Path
from typing import Any

import yaml

from usercache.config.models import (
    DEFAULT_USER_EXPIRY_SECONDS,
    CacheConfig,
    Config,
    DatabaseConfig,
    DiscordConfig,
    LoggingConfig,
    RedisConfig,
    SlackConfig,
)


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Invalid or missing configuration value."""


class EnvironmentVariableError(ConfigError):
    """Referenced environment variable is not set."""


# ${VAR_NAME}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


def expand_env_vars(value: str) -> str:
    """Replace ${VAR_NAME} in a string with the environment variable's value.

    Args:
        value: String to expand.

    Returns:
        Expanded string.

    Raises:
        EnvironmentVariableError: If a referenced variable is not set.
    """
    if not value:
        return value

    def replace_var(match: re.Match[str]) -> str:
        var_name = match.group(1)
        env_value = os.environ.get(var_name)
        if env_value is None:
            raise EnvironmentVariableError(
                f"Environment variable '{var_name}' is not set"
            )
        return env_value

    return ENV_VAR_PATTERN.sub(replace_var, value)


def _expand_recursive(data: Any) -> Any:
    """Expand environment variables in every string of a nested structure."""
    if isinstance(data, dict):
        return {key: _expand_recursive(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [_expand_recursive(item) for item in data]
    elif isinstance(data, str):
        return expand_env_vars(data)
    else:
        return data


def _validate_required_field(data: dict[str, Any], field: str, parent: str = "") -> Any:
    """Return a required field, raising if it is missing.

    Args:
        data: Section to read from.
        field: Field name.
        parent: Parent section name (for error messages).

    Returns:
        Field value.

    Raises:
        ConfigValidationError: If the field is missing.
    """
    if field not in data or data[field] is None:
        full_path = f"{parent}.{field}" if parent else field
        raise ConfigValidationError(f"Required field '{full_path}' is missing")
    return data[field]


def _to_int(value: Any, path: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigValidationError(f"Field '{path}' must be an integer") from e


def _load_database(data: dict[str, Any]) -> DatabaseConfig:
    database_data = _validate_required_field(data, "database")
    url = database_data.get("url")
    if url:
        return DatabaseConfig(url=url)

    path = database_data.get("path")
    if not path:
        raise ConfigValidationError(
            "Either 'database.url' or 'database.path' is required"
        )
    if path == ":memory:":
        return DatabaseConfig(url="sqlite+aiosqlite:///:memory:")
    return DatabaseConfig(url=f"sqlite+aiosqlite:///{path}")


def _load_cache(data: dict[str, Any]) -> CacheConfig:
    cache_data = data.get("cache") or {}
    expiry = _to_int(
        cache_data.get("user_expiry_seconds", DEFAULT_USER_EXPIRY_SECONDS),
        "cache.user_expiry_seconds",
    )
    if expiry <= 0:
        raise ConfigValidationError("'cache.user_expiry_seconds' must be positive")
    return CacheConfig(user_expiry_seconds=expiry)


def load_config(path: str | Path) -> Config:
    """Load the config file.

    Args:
        path: Path to config.yaml.

    Returns:
        Config object.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If a required value is missing or invalid.
        EnvironmentVariableError: If a referenced variable is not set.
        yaml.YAMLError: If the YAML is malformed.
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, encoding="utf-8") as f:
        raw_data = yaml.safe_load(f) or {}

    data = _expand_recursive(raw_data)

    database = _load_database(data)
    cache = _load_cache(data)

    # RedisConfig (optional; falls back to the in-memory fast cache)
    redis_config: RedisConfig | None = None
    redis_data = data.get("redis")
    if redis_data and redis_data.get("url"):
        redis_config = RedisConfig(url=redis_data["url"])

    # DiscordConfig (optional)
    discord_config: DiscordConfig | None = None
    discord_data = data.get("discord")
    if discord_data:
        guild_id = discord_data.get("preferred_guild_id")
        discord_config = DiscordConfig(
            bot_token=_validate_required_field(discord_data, "bot_token", "discord"),
            preferred_guild_id=(
                _to_int(guild_id, "discord.preferred_guild_id")
                if guild_id is not None
                else None
            ),
        )

    # SlackConfig (optional)
    slack_config: SlackConfig | None = None
    slack_data = data.get("slack")
    if slack_data:
        slack_config = SlackConfig(
            bot_token=_validate_required_field(slack_data, "bot_token", "slack"),
        )

    # LoggingConfig (optional)
    logging_config: LoggingConfig | None = None
    logging_data = data.get("logging")
    if logging_data:
        logging_config = LoggingConfig(
            level=logging_data.get("level", "INFO"),
            format=logging_data.get(
                "format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            ),
            loggers=logging_data.get("loggers"),
        )

    return Config(
        database=database,
        cache=cache,
        redis=redis_config,
        discord=discord_config,
        slack=slack_config,
        logging=logging_config,
    )
