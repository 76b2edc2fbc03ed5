"""Tests for bmm_shell.tui.editor.

Coverage:
  - History: immediate-duplicate suppression, bound, ordering
  - LineEditor editing keys: printable, backspace, Ctrl-C, Ctrl-D, Enter
  - Suggestions: cap, Tab/Enter acceptance never submits, Up/Down wrapping
  - History browsing via an injected selector and via the default menu
  - Rendering: cursor column and erasing of previously drawn suggestions
"""

from __future__ import annotations

import contextlib
import io
from unittest.mock import MagicMock

import pytest
from conftest import BACKSPACE, CTRL_C, CTRL_D, DOWN, ENTER, TAB, UP, keys

from bmm_shell.core.models import SelectItem
from bmm_shell.exceptions import SelectionCancelledError, TerminalError
from bmm_shell.tui import render
from bmm_shell.tui.editor import MAX_HISTORY, History, LineEditor

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

COMMANDS = ["vpc list", "vpc get", "vpc create", "vpc-prefix list", "site list"]
PROMPT = render.cyan("bmm:acme") + "> "


def _suggest(text: str) -> list[str]:
    return [name for name in COMMANDS if name.startswith(text.lower())]


def _editor(
    *pressed: bytes | str,
    suggest=_suggest,
    history: History | None = None,
    history_selector: MagicMock | None = None,
) -> tuple[LineEditor, io.StringIO]:
    out = io.StringIO()
    editor = LineEditor(
        suggest,
        history if history is not None else History(),
        reader=keys(*pressed),
        out=out,
        raw=contextlib.nullcontext,
        history_selector=history_selector,
    )
    return editor, out


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------


class TestHistory:
    def test_immediate_duplicate_suppressed(self) -> None:
        history = History()
        for line in ["vpc list", "vpc list", "site list", "vpc list"]:
            history.add(line)
        assert list(history) == ["vpc list", "site list", "vpc list"]

    def test_bounded_drops_oldest(self) -> None:
        history = History()
        for n in range(MAX_HISTORY + 5):
            history.add(f"cmd-{n}")
        assert len(history) == MAX_HISTORY
        assert list(history)[0] == "cmd-5"

    def test_most_recent_first(self) -> None:
        history = History(max_entries=3)
        for line in ["a", "b", "c"]:
            history.add(line)
        assert history.most_recent_first() == ["c", "b", "a"]


# ---------------------------------------------------------------------------
# Editing
# ---------------------------------------------------------------------------


class TestEditing:
    def test_submit_returns_typed_line(self) -> None:
        editor, out = _editor("site list", ENTER)
        assert editor.read_line(PROMPT) == "site list"
        assert out.getvalue().endswith(PROMPT + "site list\r\n")

    def test_backspace(self) -> None:
        editor, _ = _editor("abc", BACKSPACE, BACKSPACE, "x", ENTER)
        assert editor.read_line(PROMPT) == "ax"

    def test_backspace_on_empty_line(self) -> None:
        editor, _ = _editor(BACKSPACE, "a", ENTER)
        assert editor.read_line(PROMPT) == "a"

    def test_ctrl_c_clears_line(self) -> None:
        editor, _ = _editor("vpc", CTRL_C, "x", ENTER)
        assert editor.read_line(PROMPT) == "x"

    def test_ctrl_d_raises_eof(self) -> None:
        editor, _ = _editor("vp", CTRL_D)
        with pytest.raises(EOFError):
            editor.read_line(PROMPT)

    def test_empty_submit(self) -> None:
        editor, _ = _editor(ENTER)
        assert editor.read_line(PROMPT) == ""

    def test_unhandled_keys_ignored(self) -> None:
        editor, _ = _editor("a", b"\x1b[C", b"\x01", ENTER)
        assert editor.read_line(PROMPT) == "a"

    def test_state_reset_between_reads(self) -> None:
        editor, _ = _editor("one", ENTER, "two", ENTER)
        assert editor.read_line(PROMPT) == "one"
        assert editor.read_line(PROMPT) == "two"


# ---------------------------------------------------------------------------
# Suggestions
# ---------------------------------------------------------------------------


class TestSuggestions:
    def test_capped_at_six(self) -> None:
        many = [f"cmd {n}" for n in range(10)]
        editor, _ = _editor("c", ENTER, suggest=lambda text: many)
        editor.read_line(PROMPT)
        assert editor.suggestions == many[:6]

    def test_no_suggestions_for_empty_line(self) -> None:
        suggest = MagicMock(return_value=["x"])
        editor, _ = _editor("a", BACKSPACE, ENTER, suggest=suggest)
        editor.read_line(PROMPT)
        assert editor.suggestions == []
        suggest.assert_called_once_with("a")

    def test_tab_accepts_first_without_submitting(self) -> None:
        editor, _ = _editor("si", TAB)
        with pytest.raises(TerminalError, match="input closed"):
            editor.read_line(PROMPT)
        assert editor.line == "site list"

    def test_tab_then_enter_submits(self) -> None:
        editor, _ = _editor("si", TAB, ENTER)
        assert editor.read_line(PROMPT) == "site list"

    def test_enter_on_highlight_replaces_line_only(self) -> None:
        editor, _ = _editor("vpc", DOWN, DOWN, ENTER)
        with pytest.raises(TerminalError):
            editor.read_line(PROMPT)
        assert editor.line == "vpc get"

    def test_highlight_then_submit(self) -> None:
        editor, _ = _editor("vpc", DOWN, ENTER, ENTER)
        assert editor.read_line(PROMPT) == "vpc list"

    def test_up_wraps_to_last(self) -> None:
        editor, _ = _editor("vpc", UP, ENTER, ENTER)
        assert editor.read_line(PROMPT) == "vpc-prefix list"

    def test_down_wraps_to_first(self) -> None:
        editor, _ = _editor("vpc-", DOWN, DOWN, ENTER, ENTER)
        assert editor.read_line(PROMPT) == "vpc-prefix list"

    def test_tab_with_highlight_accepts_highlight(self) -> None:
        editor, _ = _editor("vpc", DOWN, DOWN, DOWN, TAB, ENTER)
        assert editor.read_line(PROMPT) == "vpc create"

    def test_typing_resets_highlight(self) -> None:
        editor, _ = _editor("vpc", DOWN, " ", ENTER)
        assert editor.read_line(PROMPT) == "vpc "


# ---------------------------------------------------------------------------
# History browsing
# ---------------------------------------------------------------------------


class TestHistoryBrowsing:
    def _history(self) -> History:
        history = History()
        history.add("site list")
        history.add("vpc get prod")
        return history

    def test_up_opens_selector_most_recent_first(self) -> None:
        selector = MagicMock(return_value=SelectItem(label="site list", id="site list"))
        editor, _ = _editor(UP, ENTER, history=self._history(), history_selector=selector)
        assert editor.read_line(PROMPT) == "site list"
        label, choices = selector.call_args.args
        assert label == "History"
        assert [c.id for c in choices] == ["vpc get prod", "site list"]

    def test_cancelled_browse_keeps_line(self) -> None:
        selector = MagicMock(side_effect=SelectionCancelledError("selection cancelled"))
        editor, _ = _editor(
            "zz", UP, ENTER, history=self._history(), history_selector=selector
        )
        assert editor.read_line(PROMPT) == "zz"
        selector.assert_called_once()

    def test_up_without_history_does_nothing(self) -> None:
        selector = MagicMock()
        editor, _ = _editor(UP, "a", ENTER, history_selector=selector)
        assert editor.read_line(PROMPT) == "a"
        selector.assert_not_called()

    def test_up_with_suggestions_does_not_browse(self) -> None:
        selector = MagicMock()
        editor, _ = _editor(
            "vpc", UP, ENTER, ENTER, history=self._history(), history_selector=selector
        )
        editor.read_line(PROMPT)
        selector.assert_not_called()

    def test_default_menu_shares_reader(self) -> None:
        editor, _ = _editor(UP, DOWN, ENTER, ENTER, history=self._history())
        assert editor.read_line(PROMPT) == "site list"


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


class TestRendering:
    def test_cursor_column_follows_visible_prompt(self) -> None:
        editor, out = _editor("ab", ENTER)
        editor.read_line(PROMPT)
        # "bmm:acme> " is ten columns wide
        assert render.move_to_column(13) in out.getvalue()

    def test_previous_suggestions_erased(self) -> None:
        editor, out = _editor("site", " ", ENTER, suggest=lambda text: ["x", "y"])
        editor.read_line(PROMPT)
        erase = ("\r\n" + render.clear_line()) * 2 + render.move_up(2)
        assert erase in out.getvalue()

    def test_highlighted_suggestion_reversed(self) -> None:
        editor, out = _editor("vpc", DOWN, CTRL_D)
        with pytest.raises(EOFError):
            editor.read_line(PROMPT)
        assert render.reverse(" vpc list ") in out.getvalue()
        assert render.dim("vpc get") in out.getvalue()
