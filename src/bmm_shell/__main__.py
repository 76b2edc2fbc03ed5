"""Allow ``python -m bmm_shell`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m bmm_shell`` behaves identically to the ``bmm-shell``
console script.
"""

from __future__ import annotations

from bmm_shell.cli.app import cli

if __name__ == "__main__":
    cli()
