"""Read-eval-print loop: suggestions, dispatch and the session loop.

Dispatch order for a submitted line:

1. blank lines are ignored;
2. the line is recorded in the session history;
3. ``exit`` / ``quit`` end the loop;
4. an exact command name runs with no arguments;
5. otherwise the longest command name followed by a space runs with
   the rest of the line, split shell-style, as its arguments;
6. anything else is an unknown command.

Handler failures are printed as ``Error: ...`` on stderr and the loop
continues; only Ctrl-D and ``exit``/``quit`` end it.
"""

from __future__ import annotations

import logging
import shlex
from collections.abc import Sequence

from rich.markup import escape

from bmm_shell.core.models import Scope
from bmm_shell.exceptions import BmmShellError, ResolutionError
from bmm_shell.tui.commands import ARG_RESOURCE_MAP, COMMANDS, COMMANDS_BY_NAME, Command
from bmm_shell.tui.editor import LineEditor
from bmm_shell.tui.session import Session

logger = logging.getLogger(__name__)

EXIT_WORDS = ("exit", "quit")

_BY_LENGTH: list[Command] = sorted(COMMANDS, key=lambda command: len(command.name), reverse=True)


def command_names() -> list[str]:
    return [command.name for command in COMMANDS] + list(EXIT_WORDS)


# ---------------------------------------------------------------------------
# Suggestions
# ---------------------------------------------------------------------------

def resource_suggestions(
    session: Session, command: str, resource_type: str, arg_filter: str
) -> list[str]:
    """``"<command> <name>"`` for each item whose name contains *arg_filter*.

    Names are quoted shell-style so an accepted suggestion dispatches to
    the same item; *arg_filter* may itself be (partly) quoted.
    """
    try:
        items = session.resolver.fetch(resource_type)
    except BmmShellError as exc:
        logger.debug("no %s suggestions: %s", resource_type, exc)
        return []
    needle = unquote(arg_filter).lower()
    return [
        f"{command} {shlex.quote(item.display_name)}"
        for item in items
        if needle in item.display_name.lower()
    ]


def unquote(text: str) -> str:
    """Undo shell quoting, tolerating a quote the user has not closed yet."""
    try:
        return " ".join(shlex.split(text))
    except ValueError:
        return text.replace("'", "").replace('"', "").strip()


def suggestions(session: Session, text: str, names: Sequence[str]) -> list[str]:
    """Completions for *text*: resource names after an argument-taking
    command, otherwise command names starting with *text*."""
    if not text:
        return []
    lowered = text.lower()
    for command, resource_type in ARG_RESOURCE_MAP.items():
        prefix = command + " "
        if lowered.startswith(prefix):
            return resource_suggestions(
                session, command, resource_type, text[len(prefix):]
            )
    return [name for name in names if name.lower().startswith(lowered)]


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

def split_args(text: str) -> list[str]:
    try:
        return shlex.split(text)
    except ValueError as exc:
        raise BmmShellError(f"cannot parse arguments: {exc}") from exc


def match_command(line: str) -> tuple[Command, list[str]] | None:
    """Find the command for *line* and its arguments, or ``None``."""
    command = COMMANDS_BY_NAME.get(line)
    if command is not None:
        return command, []
    for command in _BY_LENGTH:
        if line.startswith(command.name + " "):
            return command, split_args(line[len(command.name) + 1 :])
    return None


def execute(session: Session, line: str) -> None:
    """Run one command line.

    Raises
    ------
    ResolutionError
        When *line* names no known command.
    BmmShellError
        Whatever the handler raises.
    """
    matched = match_command(line)
    if matched is None:
        raise ResolutionError(
            f"unknown command: {line}",
            hint="Type 'help' to list available commands.",
        )
    command, args = matched
    logger.debug("dispatch %r args=%s", command.name, args)
    command.run(session, args)


def print_error(session: Session, exc: BmmShellError) -> None:
    session.err_console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
    if exc.hint:
        session.err_console.print(f"[yellow]Hint:[/yellow] {escape(exc.hint)}")


# ---------------------------------------------------------------------------
# Loops
# ---------------------------------------------------------------------------

def run_repl(session: Session, *, editor: LineEditor | None = None) -> None:
    """Read and run commands until Ctrl-D, ``exit`` or ``quit``."""
    names = command_names()
    if editor is None:
        editor = LineEditor(
            lambda text: suggestions(session, text, names), session.history
        )

    console = session.console
    console.print("\n[bold]BMM Interactive Mode[/bold]")
    console.print(f"Org: [cyan]{escape(session.org)}[/cyan]")
    if session.config_path:
        console.print(f"Config: [dim]{escape(session.config_path)}[/dim]")
    if not session.token:
        session.err_console.print(
            "[yellow]Warning:[/yellow] No auth token found. "
            "Type [bold]login[/bold] to authenticate."
        )
    console.print("Start typing a command. [bold]Ctrl+D[/bold] to quit.\n")

    while True:
        try:
            line = editor.read_line(session.prompt_string()).strip()
        except EOFError:
            console.print("\nGoodbye.")
            return
        if not line:
            continue

        session.history.add(line)
        if line in EXIT_WORDS:
            console.print("Goodbye.")
            return

        try:
            execute(session, line)
        except BmmShellError as exc:
            print_error(session, exc)
        except KeyboardInterrupt:
            session.err_console.print("[yellow]Interrupted.[/yellow]")
        console.print()


def split_scope_flags(words: Sequence[str]) -> tuple[list[str], str, str]:
    """Remove ``--site-id``/``--vpc-id`` (and their values) from *words*."""
    rest: list[str] = []
    found = {"--site-id": "", "--vpc-id": ""}
    index = 0
    while index < len(words):
        word = words[index]
        flag, sep, value = word.partition("=")
        if flag in found:
            if not sep and index + 1 < len(words):
                index += 1
                value = words[index]
            found[flag] = value
        else:
            rest.append(word)
        index += 1
    return rest, found["--site-id"], found["--vpc-id"]


def run_command(session: Session, words: Sequence[str]) -> None:
    """Run one command non-interactively (the scripted form of a REPL line).

    ``--site-id``/``--vpc-id`` set the scope for this command only.
    """
    rest, site_id, vpc_id = split_scope_flags(words)
    if site_id or vpc_id:
        session.scope = Scope(site_id=site_id, vpc_id=vpc_id)
    if not rest:
        raise ResolutionError("no command given", hint="Type 'help' to list commands.")
    execute(session, shlex.join(rest))
