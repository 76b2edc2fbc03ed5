"""Single-line editor with live suggestions and history browsing.

:class:`LineEditor` reads one line in raw mode.  After every keystroke
it asks a suggestion callback for completions of the current input and
draws up to ``max_suggestions`` of them below the prompt.  Accepting a
suggestion replaces the line but never submits it; only Enter with no
highlighted suggestion returns the typed text.

The editor owns no command knowledge: the REPL supplies the suggestion
callback and reads lines in a loop.
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Iterator, Sequence
from typing import TextIO

from bmm_shell.core.models import SelectItem
from bmm_shell.core.protocols import Selector
from bmm_shell.exceptions import SelectionCancelledError
from bmm_shell.tui.render import (
    clear_line,
    dim,
    move_to_column,
    move_up,
    reverse,
    visible_len,
)
from bmm_shell.tui.select import RawModeFactory, select
from bmm_shell.tui.terminal import (
    KEY_CTRL_C,
    KEY_CTRL_D,
    KEY_TAB,
    Key,
    KeyReader,
    raw_mode,
)

MAX_SUGGESTIONS: int = 6
MAX_HISTORY: int = 100

SuggestFunc = Callable[[str], Sequence[str]]


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------

class History:
    """Bounded list of submitted lines, oldest first.

    Adding the same line twice in a row keeps a single entry.  When the
    bound is exceeded the oldest entry is dropped.
    """

    def __init__(self, max_entries: int = MAX_HISTORY) -> None:
        self.max_entries = max_entries
        self._entries: list[str] = []

    def add(self, line: str) -> None:
        if self._entries and self._entries[-1] == line:
            return
        self._entries.append(line)
        if len(self._entries) > self.max_entries:
            del self._entries[0]

    def most_recent_first(self) -> list[str]:
        return list(reversed(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)


# ---------------------------------------------------------------------------
# Line editor
# ---------------------------------------------------------------------------

class LineEditor:
    """Read lines with inline autocomplete.

    Parameters
    ----------
    suggest:
        Returns completions for the current (non-empty) input.
    history:
        Shared history; browsed with Up when no suggestions are shown.
        The editor only reads it, the REPL records submitted lines.
    reader / out / raw:
        Key source, output stream and raw-mode factory.
    history_selector:
        Menu used to browse history; defaults to the select widget
        sharing this editor's reader and output.
    max_suggestions:
        Upper bound on the number of suggestion lines drawn.
    """

    def __init__(
        self,
        suggest: SuggestFunc,
        history: History,
        *,
        reader: KeyReader | None = None,
        out: TextIO | None = None,
        raw: RawModeFactory = raw_mode,
        history_selector: Selector | None = None,
        max_suggestions: int = MAX_SUGGESTIONS,
    ) -> None:
        self._suggest = suggest
        self.history = history
        self._reader = reader
        self._out = out if out is not None else sys.stdout
        self._raw = raw
        self._history_selector = history_selector
        self.max_suggestions = max_suggestions

        self.line = ""
        self.suggestions: list[str] = []
        self.selected = -1
        self._drawn_suggestions = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def read_line(self, prompt: str) -> str:
        """Return one submitted line (without the newline).

        Raises
        ------
        EOFError
            When the user presses Ctrl-D.
        TerminalError
            When raw mode or a key read fails.
        """
        if self._reader is None:
            self._reader = KeyReader()
        self.line = ""
        self.suggestions = []
        self.selected = -1
        self._drawn_suggestions = 0

        with self._raw():
            self._render(prompt)
            while True:
                key = self._reader.read_key()

                if key.char == KEY_CTRL_C:
                    self._set_line("")
                elif key.char == KEY_CTRL_D:
                    self._write(self._clear_suggestions())
                    raise EOFError
                elif key.is_enter:
                    if 0 <= self.selected < len(self.suggestions):
                        self._set_line(self.suggestions[self.selected])
                    else:
                        self._write(
                            self._clear_suggestions()
                            + clear_line()
                            + "\r"
                            + prompt
                            + self.line
                            + "\r\n"
                        )
                        return self.line
                elif key.char == KEY_TAB:
                    if self.suggestions:
                        self._set_line(self.suggestions[max(self.selected, 0)])
                elif key.special is Key.UP:
                    if self._suggestions_visible:
                        if self.selected <= 0:
                            self.selected = len(self.suggestions) - 1
                        else:
                            self.selected -= 1
                    elif len(self.history):
                        self._browse_history(prompt)
                elif key.special is Key.DOWN:
                    if self._suggestions_visible:
                        self.selected = (self.selected + 1) % len(self.suggestions)
                elif key.is_backspace:
                    if self.line:
                        self._set_line(self.line[:-1])
                elif key.is_printable:
                    self._set_line(self.line + key.char)
                else:
                    continue
                self._render(prompt)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def _suggestions_visible(self) -> bool:
        return bool(self.line) and bool(self.suggestions)

    def _set_line(self, text: str) -> None:
        self.line = text
        self.selected = -1
        self.suggestions = (
            list(self._suggest(text))[: self.max_suggestions] if text else []
        )

    def _browse_history(self, prompt: str) -> None:
        self._write(
            self._clear_suggestions() + clear_line() + "\r" + prompt + self.line + "\r\n"
        )
        choices = [SelectItem(label=entry, id=entry) for entry in self.history.most_recent_first()]
        selector = self._history_selector or self._default_history_selector
        try:
            chosen = selector("History", choices)
        except SelectionCancelledError:
            return
        self._set_line(chosen.id)

    def _default_history_selector(
        self, label: str, items: Sequence[SelectItem]
    ) -> SelectItem:
        return select(label, items, reader=self._reader, out=self._out, raw=self._raw)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _clear_suggestions(self) -> str:
        count, self._drawn_suggestions = self._drawn_suggestions, 0
        if count == 0:
            return ""
        return ("\r\n" + clear_line()) * count + move_up(count)

    def _render(self, prompt: str) -> None:
        parts = [self._clear_suggestions(), clear_line(), "\r", prompt, self.line]
        if self._suggestions_visible:
            for index, suggestion in enumerate(self.suggestions):
                parts.append("\r\n" + clear_line())
                if index == self.selected:
                    parts.append("  " + reverse(f" {suggestion} "))
                else:
                    parts.append("  " + dim(suggestion))
            parts.append(move_up(len(self.suggestions)))
            self._drawn_suggestions = len(self.suggestions)
        parts.append(move_to_column(visible_len(prompt) + len(self.line) + 1))
        self._write("".join(parts))

    def _write(self, text: str) -> None:
        if text:
            self._out.write(text)
            self._out.flush()
