"""Common platform adapter behaviour."""

import asyncio
import logging
from abc import ABC, abstractmethod

from usercache.domain.entities import PlatformUser

logger = logging.getLogger(__name__)


class BasePlatformAdapter(ABC):
    """Base class for platform adapters.

    Handles idempotent initialization. Subclasses implement identity
    validation and the remote fetch, and may override ``_setup`` and
    ``live_state_probe``.
    """

    def __init__(self) -> None:
        self._initialized = False
        self._init_lock = asyncio.Lock()

    @property
    @abstractmethod
    def name(self) -> str:
        """Platform name, used for the cache table and fast cache key."""

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Run one-time setup. Calling it again is a no-op.

        Concurrent callers wait for the first setup instead of repeating it.
        """
        if self._initialized:
            return
        async with self._init_lock:
            if self._initialized:
                return
            await self._setup()
            self._initialized = True
        logger.debug("Platform adapter %s initialized", self.name)

    async def _setup(self) -> None:
        """Platform-specific setup. Most platforms need none."""

    @abstractmethod
    def validate_identity(self, raw: str) -> str:
        """Validate and normalize a raw identity."""

    async def live_state_probe(self, identity: str) -> PlatformUser | None:
        """Look up the user in local platform state. None by default."""
        return None

    @abstractmethod
    async def remote_fetch(self, identity: str) -> PlatformUser:
        """Fetch the user from the platform API."""
