"""CLI application entry point for bmm-shell.

This module is the **sole process-level error boundary**.  It catches
:class:`~bmm_shell.exceptions.BmmShellError`, ``KeyboardInterrupt``,
and any unexpected ``Exception``, rendering user-friendly messages via
Rich and returning well-defined exit codes.

Usage
-----
* ``bmm-shell``                      interactive session
* ``bmm-shell <command> [args...]``  run one REPL command and exit
* ``bmm-shell doctor``               environment diagnostics
* ``bmm-shell --version``

Architecture notes
------------------
* No business logic lives here; work is delegated to the ``tui``,
  ``infra`` and ``core`` layers.
* Terminal and UI modules are imported lazily inside the handlers so
  ``--help`` and ``--version`` stay cheap.
"""

from __future__ import annotations

import argparse
import os
import sys
from typing import TYPE_CHECKING

from bmm_shell.cli import exit_codes
from bmm_shell.cli.console import configure_logging, console
from bmm_shell.exceptions import BmmShellError
from bmm_shell.version import __version__

if TYPE_CHECKING:
    from bmm_shell.tui.session import Session


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser.

    Global options must precede the command; everything after the first
    command word (including ``--site-id``/``--vpc-id``) belongs to it.
    """
    parser = argparse.ArgumentParser(
        prog="bmm-shell",
        description="Interactive shell for bare-metal infrastructure resources.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument("--config", default=None, help="Path to a YAML config file.")
    parser.add_argument("--org", default=None, help="Organisation to work in.")
    parser.add_argument("--base-url", default=None, help="API base URL.")
    parser.add_argument("--token", default=None, help="Bearer token.")
    parser.add_argument(
        "--debug", action="store_true", help="Log cache, scope and HTTP activity."
    )
    parser.add_argument(
        "command",
        nargs=argparse.REMAINDER,
        help="Command to run once (e.g. 'vpc list'), or 'doctor'. "
        "Omit for an interactive session.",
    )
    return parser


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _choose_config_file() -> str | None:
    """Let the user pick among several ``~/.bmm/config*.yaml`` files.

    Only offered on a terminal and when neither ``--config`` nor
    ``BMM_CONFIG`` names a file.
    """
    if os.environ.get("BMM_CONFIG"):
        return None
    if not (sys.stdin.isatty() and sys.stdout.isatty()):
        return None

    from bmm_shell.config import discover_configs, display_path
    from bmm_shell.core.models import SelectItem
    from bmm_shell.tui.select import select

    candidates = discover_configs()
    if len(candidates) <= 1:
        return None

    items = [SelectItem(label=display_path(path), id=str(path)) for path in candidates]
    console.print()
    chosen = select("Choose config for this interactive session", items)
    console.print(f"Using config: {chosen.label}\n")
    return chosen.id


def _build_session(args: argparse.Namespace, config_path: str | None) -> Session:
    from bmm_shell.config import load_settings
    from bmm_shell.infra.api_client import ApiClient
    from bmm_shell.tui.prompts import prompt_token
    from bmm_shell.tui.session import Session

    settings = load_settings(
        config_path, org=args.org, base_url=args.base_url, token=args.token
    )
    client = ApiClient(settings.base_url, settings.org, token=settings.token)
    return Session(
        client,
        settings.org,
        config_path=settings.config_path,
        token=settings.token,
        login_fn=prompt_token,
        cache_ttl=settings.cache_ttl,
    )


def _handle_session(args: argparse.Namespace) -> int:
    """Run the interactive REPL, or a single command when one was given."""
    from bmm_shell.tui.repl import run_command, run_repl

    config_path = args.config
    if config_path is None and not args.command:
        config_path = _choose_config_file()

    session = _build_session(args, config_path)
    try:
        if args.command:
            run_command(session, args.command)
        else:
            run_repl(session)
    finally:
        session.client.close()
    return exit_codes.SUCCESS


def _handle_doctor(args: argparse.Namespace) -> int:
    """Dispatch the ``doctor`` diagnostics command."""
    from bmm_shell.cli.doctor import run_doctor

    return run_doctor(args.config)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the bmm-shell CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.debug)

    if args.command and args.command[0].lower() == "doctor":
        return _handle_doctor(args)

    return _handle_session(args)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except BmmShellError as exc:
        console.print_error(str(exc), exc.hint)
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print_error(
            f"Please report this issue.\n  {type(exc).__name__}: {exc}",
            title="Unexpected error.",
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
