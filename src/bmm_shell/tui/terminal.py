"""Raw terminal mode and single-key decoding (POSIX/VT100 only).

:func:`raw_mode` is a context manager: the saved termios attributes are
restored exactly once when the block exits, whatever the exit path.
Acquisitions nest: an inner block restores the outer block's raw
settings, not the cooked ones.

:class:`KeyReader` turns the byte stream into :class:`KeyEvent` values.
It reads in chunks of at most three bytes, which is how a terminal
delivers a CSI arrow sequence, so a lone ESC never waits for more input.
"""

from __future__ import annotations

import logging
import os
import sys
import termios
import tty
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum

from bmm_shell.exceptions import TerminalError

logger = logging.getLogger(__name__)

KEY_CTRL_C = "\x03"
KEY_CTRL_D = "\x04"
KEY_BACKSPACE = "\x7f"
KEY_CTRL_H = "\x08"
KEY_TAB = "\t"
KEY_NEWLINE = "\n"
KEY_ENTER = "\r"
KEY_ESC = "\x1b"

_CHUNK = 3


class Key(Enum):
    """Special (non-literal) keys decoded from CSI sequences."""

    NONE = "none"
    UP = "up"
    DOWN = "down"
    RIGHT = "right"
    LEFT = "left"


_CSI_KEYS: dict[int, Key] = {
    ord("A"): Key.UP,
    ord("B"): Key.DOWN,
    ord("C"): Key.RIGHT,
    ord("D"): Key.LEFT,
}


@dataclass(frozen=True, slots=True)
class KeyEvent:
    """One decoded keypress.

    Either ``char`` holds a single literal character (printable or
    control) and ``special`` is :attr:`Key.NONE`, or ``special`` names an
    arrow key and ``char`` is empty.
    """

    char: str = ""
    special: Key = Key.NONE

    @property
    def is_printable(self) -> bool:
        return len(self.char) == 1 and 32 <= ord(self.char) <= 126

    @property
    def is_backspace(self) -> bool:
        return self.char in (KEY_BACKSPACE, KEY_CTRL_H)

    @property
    def is_enter(self) -> bool:
        return self.char in (KEY_ENTER, KEY_NEWLINE)


# ---------------------------------------------------------------------------
# Raw mode
# ---------------------------------------------------------------------------

@contextmanager
def raw_mode(fd: int | None = None) -> Iterator[None]:
    """Put *fd* (default: stdin) into no-echo, unbuffered mode.

    Raises
    ------
    TerminalError
        When *fd* is not a terminal or its attributes cannot be changed.
    """
    if fd is None:
        fd = sys.stdin.fileno()
    try:
        saved = termios.tcgetattr(fd)
        tty.setraw(fd)
    except (termios.error, OSError) as exc:
        raise TerminalError(
            f"cannot enter raw terminal mode: {exc}",
            hint="Interactive mode requires a terminal on stdin.",
        ) from exc
    try:
        yield
    finally:
        try:
            termios.tcsetattr(fd, termios.TCSADRAIN, saved)
        except (termios.error, OSError) as exc:
            logger.debug("restoring terminal attributes failed: %s", exc)
            raise TerminalError(f"cannot restore terminal mode: {exc}") from exc


# ---------------------------------------------------------------------------
# Key decoding
# ---------------------------------------------------------------------------

def stdin_source(fd: int | None = None) -> Callable[[int], bytes]:
    """Return a ``read(n)`` callable over the raw stdin file descriptor."""
    resolved = sys.stdin.fileno() if fd is None else fd

    def read(n: int) -> bytes:
        try:
            return os.read(resolved, n)
        except OSError as exc:
            raise TerminalError(f"reading from terminal failed: {exc}") from exc

    return read


class KeyReader:
    """Decode keypresses from a blocking ``read(n) -> bytes`` source.

    The source should return between one and *n* bytes per call (as
    ``os.read`` on a raw tty does) and ``b""`` only at end of input.
    """

    def __init__(self, read: Callable[[int], bytes] | None = None) -> None:
        self._read = read if read is not None else stdin_source()
        self._pending = bytearray()

    def read_key(self) -> KeyEvent:
        """Block for one key; decode ``ESC [ A|B|C|D`` into arrow keys.

        After an ESC only the bytes that arrived in the same chunk are
        examined.  Fewer than two of them yield a bare ESC event.  Two
        bytes that are not a known CSI arrow are consumed and also yield
        a bare ESC, so ESC typed just before two other keys in the same
        chunk swallows them.
        """
        if not self._pending:
            self._fill()
        byte = self._pending.pop(0)

        if byte != 0x1B:
            return KeyEvent(char=chr(byte))

        if len(self._pending) < 2:
            return KeyEvent(char=KEY_ESC)

        first, second = self._pending[0], self._pending[1]
        del self._pending[:2]
        if first == ord("[") and second in _CSI_KEYS:
            return KeyEvent(special=_CSI_KEYS[second])
        return KeyEvent(char=KEY_ESC)

    def _fill(self) -> None:
        chunk = self._read(_CHUNK)
        if not chunk:
            raise TerminalError("input closed")
        self._pending.extend(chunk)
