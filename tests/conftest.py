"""Shared pytest fixtures and configuration for the bmm-shell test suite.

Guidelines
----------
* No network access in any test: HTTP goes through ``httpx.MockTransport``
  or a mocked :class:`~bmm_shell.infra.api_client.ApiClient`.
* No real terminal: keys come from scripted byte chunks, output goes to
  ``io.StringIO`` and raw mode is replaced by ``contextlib.nullcontext``.
* Time is injected; no test sleeps.
"""

from __future__ import annotations

import io
from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import pytest
from rich.console import Console

from bmm_shell.core.models import NamedItem
from bmm_shell.infra.api_client import ApiClient
from bmm_shell.tui.session import Session
from bmm_shell.tui.terminal import KeyReader

UP = b"\x1b[A"
DOWN = b"\x1b[B"
ENTER = b"\r"
CTRL_C = b"\x03"
CTRL_D = b"\x04"
TAB = b"\t"
BACKSPACE = b"\x7f"


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def chunk_source(*chunks: bytes) -> Callable[[int], bytes]:
    """A ``read(n)`` that returns one keypress chunk per call, then EOF."""
    pending = [bytearray(chunk) for chunk in chunks]

    def read(n: int) -> bytes:
        while pending and not pending[0]:
            pending.pop(0)
        if not pending:
            return b""
        head = pending[0]
        out = bytes(head[:n])
        del head[:n]
        return out

    return read


def keys(*chunks: bytes | str) -> KeyReader:
    """Build a reader from keypresses; a ``str`` is typed one character at a time."""
    expanded: list[bytes] = []
    for chunk in chunks:
        if isinstance(chunk, str):
            expanded.extend(char.encode() for char in chunk)
        else:
            expanded.append(chunk)
    return KeyReader(chunk_source(*expanded))


def item(name: str, item_id: str, status: str = "", **extra: str) -> NamedItem[Any]:
    return NamedItem(name=name, id=item_id, status=status, extra=dict(extra))


def serve(client: MagicMock, payloads: dict[str, Any]) -> None:
    """Answer ``client.fetch_all`` by the resource type at the end of the path.

    A value may be a list of JSON objects, an exception to raise, or a
    callable ``(params) -> list``.
    """

    def fetch_all(path: str, params: dict[str, str] | None = None) -> list[Any]:
        value = payloads.get(path.rsplit("/", 1)[-1], [])
        if isinstance(value, BaseException):
            raise value
        if callable(value):
            return value(params or {})
        return list(value)

    client.fetch_all.side_effect = fetch_all


def capture_console() -> Console:
    return Console(
        file=io.StringIO(), force_terminal=False, color_system=None, width=200
    )


def output(console: Console) -> str:
    return console.file.getvalue()  # type: ignore[attr-defined]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def client() -> MagicMock:
    mock = MagicMock(spec=ApiClient)
    mock.org = "acme"
    mock.token = ""
    return mock


@pytest.fixture
def selector() -> MagicMock:
    return MagicMock(name="selector")


@pytest.fixture
def session(client: MagicMock, selector: MagicMock) -> Session:
    """A session over a mocked client, capturing both consoles."""
    return Session(
        client,
        "acme",
        selector=selector,
        console=capture_console(),
        err_console=capture_console(),
    )
