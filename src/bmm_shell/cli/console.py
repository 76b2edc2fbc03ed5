"""CLI console and logging helpers with optional Rich support.

This module avoids module-level imports of Rich so bootstrap paths
(``--help``, ``--version``) keep working even when it is not installed.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

from bmm_shell.exceptions import EnvironmentError


def _load_rich_console_class() -> type[Any]:
    """Return ``rich.console.Console`` class or raise ``EnvironmentError``."""
    try:
        from rich.console import Console
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Console


def get_rich_console(*, stderr: bool = True) -> Any:
    """Create a Rich console instance (stderr unless told otherwise)."""
    console_class = _load_rich_console_class()
    return console_class(stderr=stderr)


class _ConsoleProxy:
    """Minimal ``print``-compatible proxy with Rich fallback."""

    def print(self, *objects: object) -> None:
        """Render with Rich when available, else plain stderr print."""
        try:
            rich_console = get_rich_console()
        except EnvironmentError:
            print(*objects, file=sys.stderr)
            return
        rich_console.print(*objects)

    def print_error(
        self, message: str, hint: str | None = None, *, title: str = "Error:"
    ) -> None:
        """Print *title* in red, then *message* and *hint* as literal text."""
        try:
            rich_console = get_rich_console()
        except EnvironmentError:
            print(f"{title} {message}", file=sys.stderr)
            if hint:
                print(f"Hint: {hint}", file=sys.stderr)
            return
        from rich.markup import escape

        rich_console.print(f"[bold red]{escape(title)}[/bold red] {escape(message)}")
        if hint:
            rich_console.print(f"[yellow]Hint:[/yellow] {escape(hint)}")


console = _ConsoleProxy()


def configure_logging(debug: bool = False) -> None:
    """Route the ``bmm_shell`` loggers through a Rich handler on stderr.

    ``debug`` selects DEBUG, otherwise only warnings and errors show.
    """
    level = logging.DEBUG if debug else logging.WARNING
    try:
        from rich.logging import RichHandler
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    handler = RichHandler(
        console=get_rich_console(),
        show_path=debug,
        rich_tracebacks=debug,
        markup=False,
    )
    logger = logging.getLogger("bmm_shell")
    logger.handlers[:] = [handler]
    logger.setLevel(level)
    logger.propagate = False
