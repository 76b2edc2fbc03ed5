"""Filterable, arrow-navigable single-select menu.

Typing narrows the list (case-insensitive substring on the label),
Up/Down move the highlight, Enter commits, Ctrl-C/Ctrl-D abort.  Long
lists are shown through a fixed-height window that follows the cursor.

Rendering is a pure function of ``(label, filtered, cursor,
window_start, filter)``: every redraw erases exactly the lines drawn
last time and paints the whole menu again.
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Sequence
from contextlib import AbstractContextManager
from typing import TextIO

from bmm_shell.core.models import SelectItem
from bmm_shell.exceptions import ResolutionError, SelectionCancelledError
from bmm_shell.tui.render import (
    bold,
    clear_to_end,
    cyan,
    dim,
    green,
    hide_cursor,
    move_up,
    show_cursor,
    strip_ansi,
)
from bmm_shell.tui.terminal import (
    KEY_CTRL_C,
    KEY_CTRL_D,
    Key,
    KeyEvent,
    KeyReader,
    raw_mode,
)

DEFAULT_WINDOW_SIZE: int = 12

RawModeFactory = Callable[[], AbstractContextManager[None]]


def _search_text(item: SelectItem) -> str:
    """Lower-cased text the filter matches: the label plus any status."""
    text = strip_ansi(item.label)
    status = item.extra.get("status")
    if status:
        text = f"{text}  {status}"
    return text.lower()


class SelectWidget:
    """State machine and renderer for one selection.

    Parameters
    ----------
    label:
        Header shown above the choices.
    items:
        Non-empty ordered choices.
    window_size:
        Maximum number of visible rows, or ``None`` to show every row.
    reader / out / raw:
        Key source, output stream and raw-mode factory; default to the
        real terminal.
    """

    def __init__(
        self,
        label: str,
        items: Sequence[SelectItem],
        *,
        window_size: int | None = DEFAULT_WINDOW_SIZE,
        reader: KeyReader | None = None,
        out: TextIO | None = None,
        raw: RawModeFactory = raw_mode,
    ) -> None:
        if not items:
            raise ResolutionError("no items to select from")
        self.label = label
        self.items: tuple[SelectItem, ...] = tuple(items)
        self.window_size = window_size
        self.cursor = 0
        self.filter = ""
        self.window_start = 0
        self._reader = reader
        self._out = out if out is not None else sys.stdout
        self._raw = raw
        self._drawn = 0
        self._filtered: list[SelectItem] = list(self.items)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def filtered(self) -> list[SelectItem]:
        return list(self._filtered)

    @property
    def windowed(self) -> bool:
        return self.window_size is not None and len(self._filtered) > self.window_size

    def handle_key(self, key: KeyEvent) -> SelectItem | None:
        """Apply one key; return the committed item or ``None``.

        Raises
        ------
        SelectionCancelledError
            On Ctrl-C or Ctrl-D.
        """
        if key.char in (KEY_CTRL_C, KEY_CTRL_D):
            raise SelectionCancelledError("selection cancelled")

        if key.is_enter:
            if self._filtered:
                return self._filtered[self.cursor]
            return None

        if key.special is Key.UP:
            self._move(-1)
        elif key.special is Key.DOWN:
            self._move(1)
        elif key.is_backspace:
            if self.filter:
                self._set_filter(self.filter[:-1])
        elif key.is_printable:
            self._set_filter(self.filter + key.char)
        return None

    def _set_filter(self, text: str) -> None:
        self.filter = text
        needle = text.lower()
        self._filtered = [item for item in self.items if needle in _search_text(item)]
        self.cursor = 0
        self.window_start = 0

    def _move(self, delta: int) -> None:
        if not self._filtered:
            return
        last = len(self._filtered) - 1
        self.cursor = min(max(self.cursor + delta, 0), last)
        self._follow_cursor()

    def _follow_cursor(self) -> None:
        if not self.windowed or self.window_size is None:
            self.window_start = 0
            return
        size = self.window_size
        if self.cursor < self.window_start:
            self.window_start = self.cursor
        elif self.cursor >= self.window_start + size:
            self.window_start = self.cursor - size + 1
        self.window_start = min(
            max(self.window_start, 0), max(0, len(self._filtered) - size)
        )

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render_lines(self) -> list[str]:
        """Return the menu lines for the current state (no side effects)."""
        hint = self.filter if self.filter else dim("(type to filter)")
        lines = [f"{bold(self.label)} {hint}"]

        if not self._filtered:
            lines.append("  " + dim("no matches"))
            return lines

        total = len(self._filtered)
        start, end = 0, total
        if self.windowed and self.window_size is not None:
            start = self.window_start
            end = min(start + self.window_size, total)

        for index in range(start, end):
            item = self._filtered[index]
            text = item.label
            status = item.extra.get("status")
            if status:
                text = f"{text}  {dim(status)}"
            if index == self.cursor:
                lines.append(f"{cyan('>')} {bold(text)}")
            else:
                lines.append(f"  {text}")

        if self.windowed:
            indicator = f"  {start + 1}–{end} of {total}"
            if start > 0:
                indicator += "  ↑ more"
            if end < total:
                indicator += "  ↓ more"
            lines.append(dim(indicator))
        return lines

    def _erase(self) -> str:
        if self._drawn == 0:
            return ""
        drawn, self._drawn = self._drawn, 0
        return "\r" + move_up(drawn - 1) + clear_to_end()

    def _redraw(self) -> None:
        lines = self.render_lines()
        self._write(self._erase() + "\r\n".join(lines))
        self._drawn = len(lines)

    def _write(self, text: str) -> None:
        self._out.write(text)
        self._out.flush()

    # ------------------------------------------------------------------
    # Interactive loop
    # ------------------------------------------------------------------

    def run(self) -> SelectItem:
        """Drive the menu until the user commits or cancels."""
        reader = self._reader if self._reader is not None else KeyReader()
        with self._raw():
            self._write(hide_cursor())
            try:
                self._redraw()
                while True:
                    try:
                        chosen = self.handle_key(reader.read_key())
                    except SelectionCancelledError:
                        self._write(self._erase())
                        raise
                    if chosen is not None:
                        self._write(
                            self._erase()
                            + f"{bold(self.label)} {green(strip_ansi(chosen.label))}\r\n"
                        )
                        return chosen
                    self._redraw()
            finally:
                self._write(show_cursor())


def select(
    label: str,
    items: Sequence[SelectItem],
    *,
    window_size: int | None = DEFAULT_WINDOW_SIZE,
    reader: KeyReader | None = None,
    out: TextIO | None = None,
    raw: RawModeFactory = raw_mode,
) -> SelectItem:
    """Show a select menu and return the committed item.

    Raises
    ------
    ResolutionError
        If *items* is empty.
    SelectionCancelledError
        If the user presses Ctrl-C or Ctrl-D.
    """
    widget = SelectWidget(
        label, items, window_size=window_size, reader=reader, out=out, raw=raw
    )
    return widget.run()
