"""Terminal layer: the interactive session engine.

Raw-mode key input, ANSI rendering, the select widget, the line editor,
the session state and the REPL.  Only raw-mode acquisition touches the
terminal driver, and it always restores the saved attributes.

This layer may import from ``core`` and ``infra``; it never imports
from ``cli``.
"""
