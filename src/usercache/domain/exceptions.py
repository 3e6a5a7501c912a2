"""Domain exceptions."""

from usercache.domain.entities import PlatformUser


class UserCacheError(Exception):
    """Base exception for user resolution and invalidation errors."""


class InvalidIdentityError(UserCacheError):
    """Raised when an identity fails the platform's validation.

    Raised before any cache tier is touched.
    """

    def __init__(self, identity: str, reason: str = "") -> None:
        """Initialize.

        Args:
            identity: Rejected identity.
            reason: Why the identity was rejected (optional).
        """
        self.identity = identity
        self.reason = reason
        super().__init__(
            f"Invalid identity {identity!r}: {reason}"
            if reason
            else f"Invalid identity {identity!r}"
        )


class AdapterInitError(UserCacheError):
    """Raised when a platform adapter fails to initialize."""


class AdapterNotInitializedError(UserCacheError):
    """Raised when an adapter still reports uninitialized after initialize()."""


class LiveStateProbeError(UserCacheError):
    """Raised when the adapter's live-state lookup fails."""


class PersistentStoreUnavailableError(UserCacheError):
    """Raised when the persistent cache store cannot be read or written."""


class RemoteFetchError(UserCacheError):
    """Raised when the platform's remote fetch fails.

    There is no fallback after the remote fetch.
    """


class MiddlewareError(UserCacheError):
    """Raised when a middleware fails on the write path.

    The persist step is aborted, but the resolved user is still
    available to the caller through ``user``.
    """

    def __init__(self, index: int, user: PlatformUser, message: str = "") -> None:
        """Initialize.

        Args:
            index: Position of the failing middleware in the pipeline.
            user: User resolved before the middleware pipeline ran.
            message: Error message (optional).
        """
        self.index = index
        self.user = user
        super().__init__(message or f"Middleware {index} failed")
