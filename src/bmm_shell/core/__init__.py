"""Core layer: resource models, cache and name/ID resolution.

Rules
-----
* No ``print()`` calls and no terminal escape sequences.
* No filesystem or network I/O; fetching goes through injected callbacks.
* No imports from ``infra``, ``tui`` or ``cli``.
"""

from bmm_shell.core.cache import DEFAULT_TTL_SECONDS, SCOPE_SENSITIVE_TYPES, ResourceCache
from bmm_shell.core.models import JsonItem, NamedItem, Scope, SelectItem
from bmm_shell.core.protocols import FetchFunc, ResolutionMethod, ResolutionReporter, Selector
from bmm_shell.core.resolver import Resolver

__all__: list[str] = [
    "DEFAULT_TTL_SECONDS",
    "FetchFunc",
    "JsonItem",
    "NamedItem",
    "ResolutionMethod",
    "ResolutionReporter",
    "Resolver",
    "ResourceCache",
    "SCOPE_SENSITIVE_TYPES",
    "Scope",
    "SelectItem",
    "Selector",
]
