"""bmm-shell: interactive terminal front-end for bare-metal infrastructure.

Live autocomplete, arrow-key menus and name resolution on top of the
REST API, with a TTL cache of fetched resource lists.
"""

from bmm_shell.version import __version__

__all__: list[str] = ["__version__"]
