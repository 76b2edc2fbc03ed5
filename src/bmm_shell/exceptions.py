"""Custom exception hierarchy for bmm-shell.

All exceptions that cross layer boundaries must inherit from
:class:`BmmShellError`.  Raw third-party exceptions (httpx, PyYAML,
termios) must NEVER propagate beyond the layer that talks to them;
they are caught there and re-raised as a typed subclass defined here.

Hierarchy
---------
BmmShellError
├── TerminalError
├── SelectionCancelledError
├── ResolutionError
├── UpstreamError
├── ConfigError
└── EnvironmentError
"""

from __future__ import annotations


class BmmShellError(Exception):
    """Base exception for all bmm-shell errors.

    Every user-visible error condition maps to a subclass of this
    exception so that the REPL and the CLI error boundary can render a
    clean message without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Terminal ---------------------------------------------------------------

class TerminalError(BmmShellError):
    """Raised when raw mode cannot be entered/left or a key read fails.

    Fatal to the current prompt only.  The terminal state is always
    restored before this error leaves the widget that raised it.
    """


class SelectionCancelledError(BmmShellError):
    """Raised when the user aborts a menu with Ctrl-C or Ctrl-D."""


# --- Resolution -------------------------------------------------------------

class ResolutionError(BmmShellError):
    """Raised when a name/ID cannot be turned into a concrete resource."""


# --- Backend ----------------------------------------------------------------

class UpstreamError(BmmShellError):
    """Raised when the REST backend fails or returns an error status."""

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.status_code: int | None = status_code
        """HTTP status code, or ``None`` for transport failures."""


# --- Environment / configuration --------------------------------------------

class ConfigError(BmmShellError):
    """Raised when the configuration file or overrides are unusable."""


class EnvironmentError(BmmShellError):
    """Raised when a required runtime dependency is not available."""
