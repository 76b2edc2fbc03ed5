"""Domain models for bmm-shell.

All models are **frozen** dataclasses: immutable value objects with no
behaviour beyond data access.  They carry zero I/O and no dependency on
the terminal or HTTP layers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

RawT = TypeVar("RawT")


# ---------------------------------------------------------------------------
# Resource projection
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NamedItem(Generic[RawT]):
    """Display projection of any backend resource.

    The cache and resolver only ever look at ``name``, ``id``, ``status``
    and ``extra``; ``raw`` keeps the original payload, typed by the
    fetcher that produced it (``dict[str, Any]`` for JSON resources).
    """

    name: str
    """Human-readable name (falls back to a derived label or the ID)."""

    id: str
    """Backend identifier (usually a UUID)."""

    status: str = ""
    """Lifecycle status as reported by the backend, may be empty."""

    extra: dict[str, str] = field(default_factory=dict)
    """Parent references and display attributes (``siteId``, ``vpcId`` …)."""

    raw: RawT | None = None
    """The original payload this item was projected from."""

    @property
    def display_name(self) -> str:
        """Return the name, or the ID when the resource is unnamed."""
        return self.name or self.id


JsonItem = NamedItem[dict[str, Any]]
"""A :class:`NamedItem` projected from a JSON object."""


# ---------------------------------------------------------------------------
# Select widget unit
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class SelectItem:
    """A single choice offered by the select widget."""

    label: str
    """Text shown in the menu (may carry ANSI styling)."""

    id: str
    """Value returned to the caller when this item is committed."""

    extra: dict[str, str] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Active filter
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Scope:
    """The active site/VPC filter narrowing list queries."""

    site_id: str = ""
    site_name: str = ""
    vpc_id: str = ""
    vpc_name: str = ""

    def __bool__(self) -> bool:
        return bool(self.site_id or self.vpc_id)
