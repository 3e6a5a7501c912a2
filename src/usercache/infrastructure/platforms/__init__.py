"""Platform adapters."""

from usercache.infrastructure.platforms.base import BasePlatformAdapter
from usercache.infrastructure.platforms.discord_adapter import DiscordPlatformAdapter
from usercache.infrastructure.platforms.slack_adapter import SlackPlatformAdapter

__all__ = [
    "BasePlatformAdapter",
    "DiscordPlatformAdapter",
    "SlackPlatformAdapter",
]
