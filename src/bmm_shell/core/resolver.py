"""Name/ID resolution over the resource cache with interactive fallback.

The resolver turns whatever the user typed (a name, an ID, or nothing)
into a concrete :class:`~bmm_shell.core.models.NamedItem`.  It depends
on a :class:`~bmm_shell.core.protocols.Selector` injected at
construction time for the interactive path, keeping the core free of
any terminal imports.

Guarantees
----------
* A typed argument never opens the interactive selector: it either
  matches exactly or fails fast, so scripted use never blocks on a TTY.
* Fetch errors propagate unchanged when they are already ours.
* :meth:`Resolver.resolve_id` never fetches.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from bmm_shell.core.cache import ResourceCache
from bmm_shell.core.models import NamedItem, SelectItem
from bmm_shell.core.protocols import (
    FetchFunc,
    ResolutionMethod,
    ResolutionReporter,
    Selector,
)
from bmm_shell.exceptions import BmmShellError, ResolutionError, UpstreamError

logger = logging.getLogger(__name__)


class Resolver:
    """Resolve resources by name or ID using the cache and a selector.

    Parameters
    ----------
    cache:
        Shared cache; the resolver holds a reference, not ownership.
    selector:
        Interactive single-select used when no argument is given.
    reporter:
        Optional callback told about every auto-selected, matched or
        selected item.
    """

    def __init__(
        self,
        cache: ResourceCache,
        selector: Selector,
        *,
        reporter: ResolutionReporter | None = None,
    ) -> None:
        self._cache = cache
        self._selector = selector
        self._reporter = reporter
        self._fetchers: dict[str, FetchFunc] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_fetcher(self, resource_type: str, fetch: FetchFunc) -> None:
        self._fetchers[resource_type] = fetch

    @property
    def resource_types(self) -> list[str]:
        return sorted(self._fetchers)

    # ------------------------------------------------------------------
    # Fetch
    # ------------------------------------------------------------------

    def fetch(self, resource_type: str) -> list[NamedItem[Any]]:
        """Return cached items, fetching and caching them on a miss."""
        cached = self._cache.get(resource_type)
        if cached is not None:
            return cached

        fetch = self._fetchers.get(resource_type)
        if fetch is None:
            raise ResolutionError(
                f"no fetcher registered for resource type {resource_type!r}",
            )

        logger.debug("fetching %s", resource_type)
        try:
            items = fetch()
        except BmmShellError:
            raise
        except Exception as exc:
            raise UpstreamError(
                f"Unexpected error fetching {resource_type}: {exc}",
            ) from exc

        self._cache.set(resource_type, items)
        return list(items)

    def fetch_filtered(
        self, resource_type: str, key: str, value: str
    ) -> list[NamedItem[Any]]:
        """Fetch *resource_type* and keep items whose ``extra[key] == value``."""
        return [
            item
            for item in self.fetch(resource_type)
            if item.extra.get(key) == value
        ]

    # ------------------------------------------------------------------
    # Resolve
    # ------------------------------------------------------------------

    def resolve(self, resource_type: str, label: str) -> NamedItem[Any]:
        """Fetch and pick one item, auto-selecting a single candidate."""
        items = self.fetch(resource_type)
        return self.select_from_items(label, items)

    def resolve_filtered(
        self, resource_type: str, label: str, key: str, value: str
    ) -> NamedItem[Any]:
        items = self.fetch_filtered(resource_type, key, value)
        return self.select_from_items(label, items)

    def resolve_with_args(
        self, resource_type: str, label: str, args: Sequence[str]
    ) -> NamedItem[Any]:
        """Resolve from ``args[0]`` when given, else interactively.

        A non-empty ``args[0]`` is compared case-insensitively with each
        item's name and ID.  No match raises :class:`ResolutionError`
        without ever showing the selector.
        """
        return self.resolve_in_items(
            resource_type, label, self.fetch(resource_type), args
        )

    def resolve_in_items(
        self,
        resource_type: str,
        label: str,
        items: Sequence[NamedItem[Any]],
        args: Sequence[str],
    ) -> NamedItem[Any]:
        """:meth:`resolve_with_args` over an already fetched list."""
        if args and args[0]:
            query = args[0].lower()
            for item in items:
                if item.name.lower() == query or item.id.lower() == query:
                    self._report(label, item, ResolutionMethod.MATCHED)
                    return item
            raise ResolutionError(
                f"no {resource_type} matching {args[0]!r} found",
                hint=f"Run '{resource_type} list' to see available names.",
            )

        return self.select_from_items(label, items)

    def select_from_items(
        self, label: str, items: Sequence[NamedItem[Any]]
    ) -> NamedItem[Any]:
        """Show the selector for *items* (or auto-select a lone item)."""
        if not items:
            raise ResolutionError(f"no {label} available")

        if len(items) == 1:
            self._report(label, items[0], ResolutionMethod.AUTO_SELECTED)
            return items[0]

        choices = [
            SelectItem(
                label=item.display_name,
                id=item.id,
                extra={"status": item.status} if item.status else {},
            )
            for item in items
        ]
        selected = self._selector(f"{label}:", choices)

        for item in items:
            if item.id == selected.id:
                self._report(label, item, ResolutionMethod.SELECTED)
                return item
        raise ResolutionError("selected item not found")

    # ------------------------------------------------------------------
    # Reverse lookup (display only)
    # ------------------------------------------------------------------

    def resolve_name(self, resource_type: str, name: str) -> str:
        """Return the cached ID for *name*, or ``""``; never fetches."""
        item = self._cache.lookup_by_name(resource_type, name)
        return item.id if item is not None else ""

    def resolve_id(self, resource_type: str, item_id: str) -> str:
        """Return the cached name for *item_id*, or the ID itself."""
        item = self._cache.lookup_by_id(resource_type, item_id)
        return item.name if item is not None else item_id

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _report(
        self, label: str, item: NamedItem[Any], method: ResolutionMethod
    ) -> None:
        if self._reporter is not None:
            self._reporter(label, item, method)
