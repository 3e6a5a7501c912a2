"""PlatformUser entity."""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


class PlatformStatus(str, Enum):
    """Presence status reported by a platform."""

    ONLINE = "online"
    IDLE = "idle"
    DO_NOT_DISTURB = "dnd"
    OFFLINE = "offline"

    @classmethod
    def parse(cls, value: str | None) -> "PlatformStatus":
        """Parse a status string, falling back to offline.

        Args:
            value: Raw status value.

        Returns:
            Matching PlatformStatus, or OFFLINE if unknown.
        """
        try:
            return cls(value)
        except ValueError:
            return cls.OFFLINE


@dataclass(frozen=True)
class PlatformUser:
    """User resolved from an external identity platform.

    Attributes:
        id: Platform-native user ID.
        username: Account name on the platform.
        display_name: Global display name. Falls back to username when empty.
        avatar: Resolved avatar URL (not a raw hash).
        bot: Whether the user is a bot.
        status: Current presence status.
        flags: Platform-defined tags.
        extra_data: Platform-specific data (nickname, mutual guild, ...).
            Never written to the persistent tier.
    """

    id: str
    username: str
    display_name: str = ""
    avatar: str = ""
    bot: bool = False
    status: PlatformStatus = PlatformStatus.OFFLINE
    flags: frozenset[str] = field(default_factory=frozenset)
    extra_data: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("User id cannot be empty")
        if not self.display_name:
            object.__setattr__(self, "display_name", self.username)
        if not isinstance(self.flags, frozenset):
            object.__setattr__(self, "flags", frozenset(self.flags))
        if not isinstance(self.status, PlatformStatus):
            object.__setattr__(self, "status", PlatformStatus.parse(self.status))

    def with_id(self, identity: str) -> "PlatformUser":
        """Return a copy pinned to the given identity."""
        if identity == self.id:
            return self
        return replace(self, id=identity)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dict."""
        return {
            "id": self.id,
            "username": self.username,
            "display_name": self.display_name,
            "avatar": self.avatar,
            "bot": self.bot,
            "status": self.status.value,
            "flags": sorted(self.flags),
            "extra_data": dict(self.extra_data),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PlatformUser":
        """Build a PlatformUser from a dict produced by to_dict().

        Args:
            data: Decoded mapping.

        Returns:
            PlatformUser entity.

        Raises:
            KeyError: If id or username is missing.
            ValueError: If id is empty or username is not a non-empty string.
        """
        user_id = data["id"]
        username = data["username"]
        if user_id is None or user_id == "":
            raise ValueError(f"Invalid user id: {user_id!r}")
        if not isinstance(username, str) or not username:
            raise ValueError(f"Invalid username: {username!r}")

        return cls(
            id=str(user_id),
            username=username,
            display_name=data.get("display_name") or "",
            avatar=data.get("avatar") or "",
            bot=bool(data.get("bot", False)),
            status=PlatformStatus.parse(data.get("status")),
            flags=frozenset(data.get("flags") or ()),
            extra_data=dict(data.get("extra_data") or {}),
        )
