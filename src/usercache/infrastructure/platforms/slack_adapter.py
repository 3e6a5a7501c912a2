"""Slack platform adapter."""

import logging
import re
from collections import OrderedDict
from typing import Any

from slack_sdk.web.async_client import AsyncWebClient

from usercache.domain.entities import PlatformStatus, PlatformUser
from usercache.domain.exceptions import InvalidIdentityError
from usercache.infrastructure.platforms.base import BasePlatformAdapter

logger = logging.getLogger(__name__)

DEFAULT_MAX_REMEMBERED = 10_000

# Boolean user fields reported as flags
_FLAG_FIELDS = (
    "is_admin",
    "is_owner",
    "is_primary_owner",
    "is_restricted",
    "is_ultra_restricted",
    "deleted",
)


def to_platform_user(user_data: dict[str, Any]) -> PlatformUser:
    """Convert a Slack user object to a PlatformUser.

    Args:
        user_data: ``user`` object from users.info or an event payload.

    Returns:
        PlatformUser entity.
    """
    profile = user_data.get("profile") or {}
    display_name = (
        profile.get("display_name")
        or profile.get("real_name")
        or user_data.get("real_name")
        or ""
    )
    avatar = (
        profile.get("image_original")
        or profile.get("image_512")
        or profile.get("image_192")
        or ""
    )
    flags = frozenset(
        field.removeprefix("is_") for field in _FLAG_FIELDS if user_data.get(field)
    )
    extra_data: dict[str, Any] = {}
    if user_data.get("team_id"):
        extra_data["team_id"] = user_data["team_id"]
    if user_data.get("tz"):
        extra_data["tz"] = user_data["tz"]

    return PlatformUser(
        id=user_data["id"],
        username=user_data["name"],
        display_name=display_name,
        avatar=avatar,
        bot=bool(user_data.get("is_bot", False)),
        status=PlatformStatus.OFFLINE,
        flags=flags,
        extra_data=extra_data,
    )


class SlackPlatformAdapter(BasePlatformAdapter):
    """Resolve Slack users through the Web API.

    Slack keeps no local member state, so the live-state probe only
    answers for users this adapter has seen in events (see remember()).
    Remembered users are capped; the least recently used are evicted first.
    """

    IDENTITY_PATTERN = re.compile(r"^[UW][A-Z0-9]{8,}$")

    def __init__(
        self,
        client: AsyncWebClient,
        max_remembered: int = DEFAULT_MAX_REMEMBERED,
    ) -> None:
        """Initialize.

        Args:
            client: Slack AsyncWebClient.
            max_remembered: Maximum number of remembered users.
        """
        super().__init__()
        self._client = client
        self._max_remembered = max_remembered
        self._seen: OrderedDict[str, PlatformUser] = OrderedDict()

    @property
    def name(self) -> str:
        return "slack"

    def validate_identity(self, raw: str) -> str:
        """Validate a Slack user ID.

        Args:
            raw: Raw identity.

        Returns:
            Uppercased user ID.

        Raises:
            InvalidIdentityError: If the value is not a Slack user ID.
        """
        identity = raw.strip().upper()
        if not self.IDENTITY_PATTERN.match(identity):
            raise InvalidIdentityError(raw, "not a Slack user ID")
        return identity

    def remember(self, user_data: dict[str, Any]) -> PlatformUser:
        """Record a user object delivered with an event.

        Args:
            user_data: Slack user object (must include id and name).

        Returns:
            The recorded user.
        """
        user = to_platform_user(user_data)
        self._seen[user.id] = user
        self._seen.move_to_end(user.id)
        while len(self._seen) > self._max_remembered:
            self._seen.popitem(last=False)
        logger.debug("Remembered Slack user %s", user.id)
        return user

    def forget(self, identity: str) -> None:
        """Drop a remembered user (e.g. on a user_change event)."""
        self._seen.pop(identity, None)

    async def live_state_probe(self, identity: str) -> PlatformUser | None:
        user = self._seen.get(identity)
        if user is not None:
            self._seen.move_to_end(identity)
        return user

    async def remote_fetch(self, identity: str) -> PlatformUser:
        response = await self._client.users_info(user=identity)
        return to_platform_user(response["user"])
