"""Discord platform adapter."""

import logging

import discord

from usercache.domain.entities import PlatformStatus, PlatformUser
from usercache.domain.exceptions import InvalidIdentityError
from usercache.infrastructure.platforms.base import BasePlatformAdapter

logger = logging.getLogger(__name__)

# Snowflakes are unsigned 64-bit integers. Anything outside this length
# range is not a real user ID.
MIN_SNOWFLAKE_LENGTH = 17
MAX_SNOWFLAKE_LENGTH = 20
MAX_SNOWFLAKE = 2**64 - 1

_STATUS_MAP = {
    discord.Status.online: PlatformStatus.ONLINE,
    discord.Status.idle: PlatformStatus.IDLE,
    discord.Status.dnd: PlatformStatus.DO_NOT_DISTURB,
}


def to_platform_status(status: discord.Status | str | None) -> PlatformStatus:
    """Map a Discord presence status to PlatformStatus."""
    if isinstance(status, discord.Status):
        return _STATUS_MAP.get(status, PlatformStatus.OFFLINE)
    return PlatformStatus.parse(status)


class DiscordPlatformAdapter(BasePlatformAdapter):
    """Resolve Discord users through a discord.py client.

    The live-state probe reads the client's member cache, checking the
    preferred guild first and then every other guild the bot is in.
    Remote fetches call the ``GET /users/{id}`` endpoint.
    """

    def __init__(
        self,
        client: discord.Client,
        preferred_guild_id: int | None = None,
    ) -> None:
        """Initialize.

        Args:
            client: Connected discord.py client.
            preferred_guild_id: Guild to check first for live state.
        """
        super().__init__()
        self._client = client
        self._preferred_guild_id = preferred_guild_id

    @property
    def name(self) -> str:
        return "discord"

    def validate_identity(self, raw: str) -> str:
        """Validate a snowflake user ID.

        Args:
            raw: Raw identity.

        Returns:
            Snowflake as a string without surrounding whitespace.

        Raises:
            InvalidIdentityError: If the value is not a plausible snowflake.
        """
        identity = raw.strip()
        if not identity.isdigit() or not identity.isascii():
            raise InvalidIdentityError(raw, "not a snowflake")
        if not MIN_SNOWFLAKE_LENGTH <= len(identity) <= MAX_SNOWFLAKE_LENGTH:
            raise InvalidIdentityError(raw, "invalid snowflake length")
        if int(identity) > MAX_SNOWFLAKE:
            raise InvalidIdentityError(raw, "snowflake out of range")
        return identity

    async def live_state_probe(self, identity: str) -> PlatformUser | None:
        user_id = int(identity)

        preferred = (
            self._client.get_guild(self._preferred_guild_id)
            if self._preferred_guild_id is not None
            else None
        )
        if preferred is not None:
            member = preferred.get_member(user_id)
            if member is not None:
                return self._from_member(member, preferred, preferred=True)

        for guild in self._client.guilds:
            if guild.id == self._preferred_guild_id:
                continue  # Already checked
            member = guild.get_member(user_id)
            if member is not None:
                logger.debug("Found %s in guild %s", identity, guild.id)
                return self._from_member(member, guild, preferred=False)

        return None

    async def remote_fetch(self, identity: str) -> PlatformUser:
        user = await self._client.fetch_user(int(identity))
        return PlatformUser(
            id=identity,
            username=user.name,
            display_name=user.global_name or "",
            avatar=user.display_avatar.url,
            bot=user.bot,
            status=PlatformStatus.OFFLINE,
            flags=self._flags(user),
        )

    def _from_member(
        self, member: discord.Member, guild: discord.Guild, preferred: bool
    ) -> PlatformUser:
        avatar = member.avatar or member.default_avatar
        return PlatformUser(
            id=str(member.id),
            username=member.name,
            display_name=member.global_name or "",
            avatar=avatar.url,
            bot=member.bot,
            status=to_platform_status(member.status),
            flags=self._flags(member),
            extra_data={
                "nickname": member.nick,
                "mutual_guild": str(guild.id),
                "preferred_guild": preferred,
            },
        )

    @staticmethod
    def _flags(user: discord.User | discord.Member) -> frozenset[str]:
        public_flags = getattr(user, "public_flags", None)
        if public_flags is None:
            return frozenset()
        return frozenset(flag.name for flag in public_flags.all())
