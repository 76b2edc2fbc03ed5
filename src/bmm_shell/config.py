"""Configuration loading for bmm-shell.

Settings come from three layers, highest precedence first:

1. explicit command-line values (``--org``, ``--base-url``, ``--token``);
2. environment variables (``BMM_API_BASE``, ``BMM_ORG``, ``BMM_TOKEN``,
   ``BMM_CACHE_TTL``);
3. the YAML config file (``~/.bmm/config.yaml`` unless ``--config`` or
   ``BMM_CONFIG`` names another one).

PyYAML errors never leave this module; they become
:class:`~bmm_shell.exceptions.ConfigError`.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from bmm_shell.core.cache import DEFAULT_TTL_SECONDS
from bmm_shell.exceptions import ConfigError

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".bmm"
DEFAULT_CONFIG_NAMES = ("config.yaml", "config.yml")


@dataclass(frozen=True, slots=True)
class Settings:
    """Resolved settings for one interactive session."""

    base_url: str
    org: str
    token: str = ""
    config_path: str = ""
    cache_ttl: float = DEFAULT_TTL_SECONDS


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------

def config_dir() -> Path:
    return Path.home() / CONFIG_DIR_NAME


def default_config_path() -> Path:
    return config_dir() / DEFAULT_CONFIG_NAMES[0]


def discover_configs(directory: Path | None = None) -> list[Path]:
    """Return ``config*.yaml``/``config*.yml`` files, default first then by name."""
    directory = directory if directory is not None else config_dir()
    if not directory.is_dir():
        return []
    candidates = [
        path
        for path in directory.iterdir()
        if path.is_file()
        and path.name.startswith("config")
        and path.suffix in (".yaml", ".yml")
    ]
    return sorted(
        candidates,
        key=lambda path: (path.name not in DEFAULT_CONFIG_NAMES, path.name),
    )


def display_path(path: Path) -> str:
    """Abbreviate the home directory as ``~``."""
    home = Path.home()
    try:
        return "~/" + str(path.relative_to(home))
    except ValueError:
        return str(path)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def read_config_file(path: Path) -> dict[str, Any]:
    """Parse *path* as a YAML mapping.

    Raises
    ------
    ConfigError
        When the file cannot be read, is not valid YAML, or is not a
        mapping at the top level.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"cannot read config file {path}: {exc}") from exc
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise ConfigError(
            f"config file {path} is not valid YAML",
            hint=str(exc),
        ) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a mapping")
    return data


def _section_value(data: Mapping[str, Any], section: str, key: str) -> str:
    block = data.get(section)
    if not isinstance(block, dict):
        return ""
    value = block.get(key)
    return str(value) if value is not None else ""


def _parse_ttl(raw: str) -> float:
    try:
        ttl = float(raw)
    except ValueError as exc:
        raise ConfigError(f"BMM_CACHE_TTL must be a number, got {raw!r}") from exc
    if ttl < 0:
        raise ConfigError("BMM_CACHE_TTL must not be negative")
    return ttl


def load_settings(
    config_path: str | None = None,
    *,
    org: str | None = None,
    base_url: str | None = None,
    token: str | None = None,
    env: Mapping[str, str] | None = None,
) -> Settings:
    """Merge flags, environment and config file into :class:`Settings`.

    Raises
    ------
    ConfigError
        When an explicitly named config file is missing or unusable, or
        when no org or API base URL is configured anywhere.
    """
    env = os.environ if env is None else env

    explicit = config_path or env.get("BMM_CONFIG", "")
    path = Path(explicit).expanduser() if explicit else default_config_path()
    if path.is_file():
        data = read_config_file(path)
        logger.debug("loaded config from %s", path)
    elif explicit:
        raise ConfigError(
            f"config file not found: {path}",
            hint="Check the --config path or BMM_CONFIG.",
        )
    else:
        logger.debug("no config file at %s", path)
        data = {}

    resolved_org = org or env.get("BMM_ORG") or _section_value(data, "api", "org")
    if not resolved_org:
        raise ConfigError(
            "org is required",
            hint=f"Set api.org in {display_path(path)}, BMM_ORG, or pass --org.",
        )

    resolved_base = (
        base_url or env.get("BMM_API_BASE") or _section_value(data, "api", "base")
    )
    if not resolved_base:
        raise ConfigError(
            "API base URL is required",
            hint=f"Set api.base in {display_path(path)}, BMM_API_BASE, or pass --base-url.",
        )

    resolved_token = (
        token or env.get("BMM_TOKEN") or _section_value(data, "auth", "token")
    )

    ttl_raw = env.get("BMM_CACHE_TTL", "")
    cache_ttl = _parse_ttl(ttl_raw) if ttl_raw else DEFAULT_TTL_SECONDS

    return Settings(
        base_url=resolved_base,
        org=resolved_org,
        token=resolved_token,
        config_path=str(path) if path.is_file() else "",
        cache_ttl=cache_ttl,
    )
