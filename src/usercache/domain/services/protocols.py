"""Domain service protocols."""

from collections.abc import Awaitable, Callable
from typing import Protocol

from usercache.domain.entities import PlatformUser


class PlatformAdapter(Protocol):
    """Identity platform abstraction (Discord, Slack, etc.).

    The caller owns the adapter. The tiered cache borrows it per call
    and initializes it lazily on first use.
    """

    @property
    def name(self) -> str:
        """Platform name, used for the cache table and fast cache key."""
        ...

    @property
    def is_initialized(self) -> bool:
        """Whether initialize() has completed."""
        ...

    async def initialize(self) -> None:
        """Run one-time setup. Calling it again is a no-op."""
        ...

    def validate_identity(self, raw: str) -> str:
        """Validate and normalize a raw identity.

        Args:
            raw: Identity as given by the caller.

        Returns:
            Normalized identity.

        Raises:
            InvalidIdentityError: If the identity is malformed.
        """
        ...

    async def live_state_probe(self, identity: str) -> PlatformUser | None:
        """Look up the user in state the platform connection already holds.

        Must not perform network I/O of its own.

        Args:
            identity: Normalized identity.

        Returns:
            User if resident, otherwise None.
        """
        ...

    async def remote_fetch(self, identity: str) -> PlatformUser:
        """Fetch the user from the platform API.

        Args:
            identity: Normalized identity.

        Returns:
            User as reported by the platform.
        """
        ...


Middleware = Callable[
    [PlatformAdapter, PlatformUser], PlatformUser | Awaitable[PlatformUser]
]
"""Write-path transform applied to a resolved user before it is persisted."""
