"""Cache tier entities used by invalidation."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum


class CacheTier(str, Enum):
    """Durable cache tiers that can be invalidated."""

    PERSISTENT = "persistent"
    FAST_CACHE = "fast_cache"

    @classmethod
    def resolve(cls, tiers: Iterable["CacheTier"] | None) -> frozenset["CacheTier"]:
        """Resolve a tier selection. An empty selection means every tier."""
        selected = frozenset(tiers or ())
        return selected or frozenset(cls)


@dataclass(frozen=True)
class ClearResult:
    """Outcome of clearing a user from the cache.

    Attributes:
        cleared_from: Tiers that actually held an entry and were cleared.
    """

    cleared_from: frozenset[CacheTier] = field(default_factory=frozenset)
