"""TTL cache of fetched resource lists, keyed by resource type.

The cache never performs I/O: a miss is reported as ``None`` and the
caller (normally :class:`~bmm_shell.core.resolver.Resolver`) decides
whether to fetch.  Stale entries are treated exactly like absent ones,
both by :meth:`ResourceCache.get` and by the lookup helpers.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from bmm_shell.core.models import NamedItem

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS: float = 30.0

SCOPE_SENSITIVE_TYPES: frozenset[str] = frozenset(
    {
        "vpc",
        "subnet",
        "instance",
        "machine",
        "operating-system",
        "ssh-key-group",
        "allocation",
        "ip-block",
        "network-security-group",
        "sku",
        "rack",
        "vpc-prefix",
        "expected-machine",
        "infiniband-partition",
        "nvlink-logical-partition",
        "dpu-extension-service",
    }
)
"""Resource types whose list queries depend on the active site/VPC scope."""


@dataclass(frozen=True, slots=True)
class CacheEntry:
    items: tuple[NamedItem[Any], ...]
    fetched_at: float


class ResourceCache:
    """Per-type store of ``(items, fetched_at)`` with a freshness bound.

    Parameters
    ----------
    ttl:
        Seconds after which an entry is considered missing.  An entry
        exactly ``ttl`` seconds old is still fresh.
    clock:
        Monotonic time source; injectable for deterministic tests.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl: float = ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get(self, resource_type: str) -> list[NamedItem[Any]] | None:
        """Return the cached items, or ``None`` when absent or stale."""
        entry = self._entries.get(resource_type)
        if entry is None:
            logger.debug("cache miss: %s", resource_type)
            return None
        age = self._clock() - entry.fetched_at
        if age > self.ttl:
            logger.debug("cache stale: %s (%.1fs old)", resource_type, age)
            return None
        logger.debug("cache hit: %s (%d items)", resource_type, len(entry.items))
        return list(entry.items)

    def lookup_by_name(self, resource_type: str, name: str) -> NamedItem[Any] | None:
        """Case-insensitive exact name match over fresh cached data only."""
        items = self.get(resource_type)
        if items is None:
            return None
        wanted = name.lower()
        for item in items:
            if item.name.lower() == wanted:
                return item
        return None

    def lookup_by_id(self, resource_type: str, item_id: str) -> NamedItem[Any] | None:
        """Exact ID match over fresh cached data only."""
        items = self.get(resource_type)
        if items is None:
            return None
        for item in items:
            if item.id == item_id:
                return item
        return None

    # ------------------------------------------------------------------
    # Write / invalidate
    # ------------------------------------------------------------------

    def set(self, resource_type: str, items: Sequence[NamedItem[Any]]) -> None:
        """Store *items* for *resource_type*, stamped with the current time."""
        self._entries[resource_type] = CacheEntry(
            items=tuple(items),
            fetched_at=self._clock(),
        )

    def invalidate(self, resource_type: str) -> None:
        self._entries.pop(resource_type, None)

    def invalidate_all(self) -> None:
        self._entries.clear()

    def invalidate_filtered(self) -> None:
        """Drop every scope-sensitive entry; other types are untouched."""
        for resource_type in SCOPE_SENSITIVE_TYPES:
            self._entries.pop(resource_type, None)
