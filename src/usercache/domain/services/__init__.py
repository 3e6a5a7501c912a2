"""Domain services."""

from usercache.domain.services.protocols import Middleware, PlatformAdapter

__all__ = ["Middleware", "PlatformAdapter"]
