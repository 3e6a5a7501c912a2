"""CachedUserRecord entity (persistent tier projection of PlatformUser)."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from usercache.domain.entities.platform_user import PlatformStatus, PlatformUser


@dataclass(frozen=True)
class CachedUserRecord:
    """Row of a platform's internal user cache table.

    Attributes:
        id: Platform-native user ID (primary key).
        username: Account name.
        display_name: Display name.
        avatar: Resolved avatar URL.
        bot: Whether the user is a bot.
        created_at: When the row was first inserted.
        last_updated: When the row was last upserted.
    """

    id: str
    username: str
    display_name: str
    avatar: str
    bot: bool
    created_at: datetime
    last_updated: datetime

    def age(self, now: datetime | None = None) -> timedelta:
        """Time elapsed since the row was last updated."""
        current = now or datetime.now(timezone.utc)
        return current - self.last_updated

    def is_stale(self, expiry: timedelta, now: datetime | None = None) -> bool:
        """Check whether the row is at or past the expiry window.

        Args:
            expiry: Expiry window.
            now: Current time (defaults to now in UTC).

        Returns:
            True if the row should be refreshed.
        """
        return self.age(now) >= expiry

    def to_platform_user(self) -> PlatformUser:
        """Convert to a PlatformUser.

        Presence, flags and extra data are not persisted, so the
        result is always offline with no flags.
        """
        return PlatformUser(
            id=self.id,
            username=self.username,
            display_name=self.display_name,
            avatar=self.avatar,
            bot=self.bot,
            status=PlatformStatus.OFFLINE,
        )
