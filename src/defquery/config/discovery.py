"""Locating and reading ``defquery.toml``.

A config file is chosen in this order: the ``--config`` flag, the
``DEFQUERY_CONFIG`` env var, then the nearest ``defquery.toml`` found by
walking up from the starting directory. Its parent directory becomes the
project root that holds the default database.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

CONFIG_FILENAME = "defquery.toml"
CONFIG_ENV_VAR = "DEFQUERY_CONFIG"


class ConfigError(Exception):
    """The config file is missing or is not valid TOML."""


def locate_config(explicit: str | Path | None = None, start: Path | None = None) -> Path | None:
    """Return the config file to load, or None to run on defaults.

    An *explicit* path, or a path named by ``DEFQUERY_CONFIG``, must exist.

    Raises:
        ConfigError: A named config file does not exist.
    """
    named = explicit or os.environ.get(CONFIG_ENV_VAR)
    if named:
        path = Path(named).expanduser()
        if not path.is_file():
            msg = f"Config file not found: {path}"
            raise ConfigError(msg)
        return path

    directory = (start or Path.cwd()).resolve()
    for candidate_dir in (directory, *directory.parents):
        candidate = candidate_dir / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def read_config(path: Path) -> dict[str, Any]:
    """Parse *path* as TOML; an empty file yields an empty mapping."""
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise ConfigError(msg) from exc
