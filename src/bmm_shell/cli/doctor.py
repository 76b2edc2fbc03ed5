"""``bmm-shell doctor``: environment diagnostics command.

Gathers runtime information and renders a Rich table summarising
whether this machine can run an interactive session: Python version,
required libraries, a usable config file and a terminal on stdin.
"""

from __future__ import annotations

import platform
import sys
from importlib import metadata

from bmm_shell.cli import exit_codes
from bmm_shell.cli.console import console
from bmm_shell.config import load_settings
from bmm_shell.exceptions import ConfigError
from bmm_shell.version import __version__

Check = tuple[str, str, str]

REQUIRED_DISTRIBUTIONS: tuple[str, ...] = ("rich", "questionary", "httpx", "PyYAML")


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _python_version_check() -> Check:
    version = platform.python_version()
    ok = sys.version_info[:2] >= (3, 10)
    status = "[green]OK[/green]" if ok else "[red]FAIL (>=3.10 required)[/red]"
    return "Python", version, status


def _distribution_check(name: str) -> Check:
    try:
        version = metadata.version(name)
    except metadata.PackageNotFoundError:
        return name, "NOT INSTALLED", "[red]FAIL[/red]"
    return name, version, "[green]OK[/green]"


def _config_check(config_path: str | None) -> Check:
    """Config is a warning when incomplete: flags and env can fill it in."""
    try:
        settings = load_settings(config_path)
    except ConfigError as exc:
        return "config", str(exc), "[yellow]WARN[/yellow]"
    source = settings.config_path or "environment"
    return "config", f"{settings.org} @ {source}", "[green]OK[/green]"


def _terminal_check() -> Check:
    if sys.stdin.isatty() and sys.stdout.isatty():
        return "terminal", "interactive", "[green]OK[/green]"
    return "terminal", "not a TTY", "[yellow]WARN[/yellow]"


def _os_check() -> Check:
    system_raw = platform.system()
    system_display = {"Linux": "Linux", "Darwin": "macOS"}.get(system_raw, system_raw)
    value = f"{system_display} {platform.release()} ({platform.machine()})"
    if system_raw == "Windows":
        return "OS", value, "[red]FAIL (POSIX terminal required)[/red]"
    return "OS", value, "[green]OK[/green]"


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_doctor(config_path: str | None = None) -> int:
    """Execute all diagnostic checks and render a summary table.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` when no check fails,
        :data:`exit_codes.GENERAL_ERROR` otherwise.  Warnings do not fail.
    """
    from rich.table import Table

    checks = [
        ("bmm-shell", __version__, "[green]OK[/green]"),
        _python_version_check(),
        *(_distribution_check(name) for name in REQUIRED_DISTRIBUTIONS),
        _config_check(config_path),
        _terminal_check(),
        _os_check(),
    ]
    has_failure = any("FAIL" in status for _, _, status in checks)

    table = Table(
        title="bmm-shell doctor",
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
    )
    table.add_column("Component", style="bold", min_width=12)
    table.add_column("Value", min_width=20)
    table.add_column("Status", justify="center", min_width=8)
    for label, value, status in checks:
        table.add_row(label, value, status)

    console.print()
    console.print(table)
    console.print()

    if has_failure:
        console.print("[bold red]Some checks failed.[/bold red]")
        return exit_codes.GENERAL_ERROR
    console.print("[bold green]All checks passed.[/bold green]")
    return exit_codes.SUCCESS
