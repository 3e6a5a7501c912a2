"""Configuration management."""

from usercache.config.loader import (
    ConfigError,
    ConfigValidationError,
    EnvironmentVariableError,
    expand_env_vars,
    load_config,
)
from usercache.config.models import (
    CacheConfig,
    Config,
    DatabaseConfig,
    DiscordConfig,
    LoggingConfig,
    RedisConfig,
    SlackConfig,
)

__all__ = [
    "CacheConfig",
    "Config",
    "ConfigError",
    "ConfigValidationError",
    "DatabaseConfig",
    "DiscordConfig",
    "EnvironmentVariableError",
    "LoggingConfig",
    "RedisConfig",
    "SlackConfig",
    "expand_env_vars",
    "load_config",
]
