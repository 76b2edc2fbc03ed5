"""CLI layer: argument parsing, configuration selection and error boundary.

This package is the outermost layer of the application.  It may import
from ``core``, ``infra`` and ``tui``, but no other layer may import
from ``cli``.
"""
