"""Protocols (interfaces) consumed by the core layer.

These define the contracts that the infrastructure and terminal layers
must satisfy.  Core code depends ONLY on these protocols, never on
concrete implementations, so the resolver can be driven by an HTTP
backend in production and by plain lists in tests.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Any, Protocol

from bmm_shell.core.models import NamedItem, SelectItem


class FetchFunc(Protocol):
    """Fetch the full list of one resource type from the backend.

    Implementations must map all backend-specific exceptions to
    :class:`~bmm_shell.exceptions.UpstreamError`.
    """

    def __call__(self) -> list[NamedItem[Any]]:
        ...  # pragma: no cover


class Selector(Protocol):
    """Interactive single-select over a non-empty sequence of items.

    Raises
    ------
    SelectionCancelledError
        When the user aborts the menu.
    """

    def __call__(self, label: str, items: Sequence[SelectItem]) -> SelectItem:
        ...  # pragma: no cover


class ResolutionMethod(str, Enum):
    """How a resolver call arrived at its result."""

    AUTO_SELECTED = "auto-selected"
    MATCHED = "matched"
    SELECTED = "selected"


class ResolutionReporter(Protocol):
    """Receives a notice for every resolved item (display is the caller's)."""

    def __call__(
        self, label: str, item: NamedItem[Any], method: ResolutionMethod
    ) -> None:
        ...  # pragma: no cover
