"""Stateless ANSI/VT100 rendering primitives.

Every helper returns the escape sequence (or wrapped text) as a string;
nothing here writes to the terminal or remembers what was drawn.
Callers track how many lines they rendered so they can erase exactly
that region before the next redraw.
"""

from __future__ import annotations

import re

ESC = "\x1b"
CSI = ESC + "["

_ANSI_RE = re.compile(r"\x1b[^A-Za-z]*[A-Za-z]")


# ---------------------------------------------------------------------------
# Cursor movement and clearing
# ---------------------------------------------------------------------------

def move_up(n: int) -> str:
    """``ESC[nA``, or nothing for ``n <= 0`` (``ESC[0A`` would move one line)."""
    return f"{CSI}{n}A" if n > 0 else ""


def move_down(n: int) -> str:
    return f"{CSI}{n}B" if n > 0 else ""


def move_to_column(col: int) -> str:
    """Move to 1-based column *col* on the current line."""
    return f"{CSI}{max(col, 1)}G"


def clear_line() -> str:
    return f"{CSI}2K"


def clear_to_end() -> str:
    """Clear from the cursor to the end of the screen."""
    return f"{CSI}J"


def hide_cursor() -> str:
    return f"{CSI}?25l"


def show_cursor() -> str:
    return f"{CSI}?25h"


# ---------------------------------------------------------------------------
# SGR styling
# ---------------------------------------------------------------------------

def _sgr(code: str, text: str) -> str:
    return f"{CSI}{code}m{text}{CSI}0m"


def bold(text: str) -> str:
    return _sgr("1", text)


def dim(text: str) -> str:
    return _sgr("2", text)


def reverse(text: str) -> str:
    return _sgr("7", text)


def red(text: str) -> str:
    return _sgr("31", text)


def green(text: str) -> str:
    return _sgr("32", text)


def yellow(text: str) -> str:
    return _sgr("33", text)


def cyan(text: str) -> str:
    return _sgr("36", text)


# ---------------------------------------------------------------------------
# Measurement
# ---------------------------------------------------------------------------

def strip_ansi(text: str) -> str:
    """Drop escape sequences: ESC through the first ASCII letter."""
    return _ANSI_RE.sub("", text)


def visible_len(text: str) -> int:
    return len(strip_ansi(text))
