"""Middleware pipeline for the user cache write path."""

import inspect
import logging
from collections.abc import Iterable

from usercache.domain.entities import PlatformUser
from usercache.domain.exceptions import MiddlewareError
from usercache.domain.services import Middleware, PlatformAdapter

logger = logging.getLogger(__name__)


class MiddlewarePipeline:
    """Ordered set of transforms applied before a user is persisted.

    Middlewares run in registration order, only on the write path.
    The first failure stops the pipeline.
    """

    def __init__(self, middlewares: Iterable[Middleware] = ()) -> None:
        """Initialize the pipeline.

        Args:
            middlewares: Initial middlewares, in order.
        """
        self._middlewares: list[Middleware] = list(middlewares)

    def register(self, middleware: Middleware) -> None:
        """Append a middleware to the end of the pipeline."""
        self._middlewares.append(middleware)

    def __len__(self) -> int:
        return len(self._middlewares)

    async def apply(
        self, adapter: PlatformAdapter, user: PlatformUser
    ) -> PlatformUser:
        """Run every middleware over the user.

        Args:
            adapter: Adapter that resolved the user.
            user: Resolved user.

        Returns:
            Transformed user.

        Raises:
            MiddlewareError: If a middleware raises. The error carries the
                user as it was before the pipeline ran.
        """
        current = user
        for index, middleware in enumerate(self._middlewares):
            try:
                result = middleware(adapter, current)
                if inspect.isawaitable(result):
                    result = await result
            except Exception as e:
                raise MiddlewareError(
                    index, user, f"Middleware {index} failed: {e}"
                ) from e
            current = result
        return current
