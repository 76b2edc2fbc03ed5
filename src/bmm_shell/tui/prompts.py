"""Free-text, confirmation and password prompts backed by questionary.

questionary is imported lazily so that non-interactive paths (one-shot
list/get commands, ``--help``) never need it.  A prompt aborted with
Ctrl-C or Esc (questionary returns ``None``) raises
:class:`~bmm_shell.exceptions.SelectionCancelledError` so the REPL
reports it like any other cancelled widget.
"""

from __future__ import annotations

from typing import Any

from bmm_shell.exceptions import EnvironmentError, ResolutionError, SelectionCancelledError


def _import_questionary() -> Any:
    """Import questionary lazily for interactive prompts."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "questionary is not installed. Install with: pip install questionary",
        ) from exc
    return questionary


def prompt_text(label: str, *, required: bool = False, default: str = "") -> str:
    """Ask for one line of text.

    Raises
    ------
    SelectionCancelledError
        If the user aborts the prompt.
    ResolutionError
        If *required* and the answer is blank.
    """
    questionary = _import_questionary()
    answer: str | None = questionary.text(f"{label}:", default=default).ask()
    if answer is None:
        raise SelectionCancelledError("input cancelled")
    answer = answer.strip()
    if required and not answer:
        raise ResolutionError(f"{label} is required")
    return answer


def prompt_confirm(message: str) -> bool:
    """Ask a yes/no question; defaults to no."""
    questionary = _import_questionary()
    answer: bool | None = questionary.confirm(message, default=False).ask()
    if answer is None:
        raise SelectionCancelledError("confirmation cancelled")
    return answer


def prompt_token() -> str:
    """Ask for a bearer token without echoing it."""
    questionary = _import_questionary()
    answer: str | None = questionary.password("API token:").ask()
    if answer is None:
        raise SelectionCancelledError("login cancelled")
    answer = answer.strip()
    if not answer:
        raise ResolutionError("API token is required")
    return answer
