"""Config file discovery.

Settings live either in a dedicated ``fieldbind.toml`` or in the
``[tool.fieldbind]`` table of a project's ``pyproject.toml``. Discovery
walks up from the working directory and stops at the first directory
holding one of them; ``fieldbind.toml`` wins within a directory. The
FIELDBIND_CONFIG env var replaces the search with an explicit file.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from fieldbind.errors import ConfigError

CONFIG_FILENAME = "fieldbind.toml"
PYPROJECT_FILENAME = "pyproject.toml"
CONFIG_ENV_VAR = "FIELDBIND_CONFIG"

logger = logging.getLogger(__name__)


def _tool_table(data: dict[str, Any]) -> dict[str, Any] | None:
    tool = data.get("tool")
    if not isinstance(tool, dict):
        return None
    table = tool.get("fieldbind")
    return table if isinstance(table, dict) else None


def _pyproject_has_table(path: Path) -> bool:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError):
        logger.debug("Ignoring unreadable %s", path, exc_info=True)
        return False
    return _tool_table(data) is not None


def find_config(start: Path | None = None) -> Path | None:
    """Return the config file governing *start* (default: cwd), or None."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        pyproject = directory / PYPROJECT_FILENAME
        if pyproject.is_file() and _pyproject_has_table(pyproject):
            return pyproject
    return None


def read_config_table(path: Path) -> dict[str, Any]:
    """Parse *path* and return its fieldbind settings table.

    For ``pyproject.toml`` that is ``[tool.fieldbind]`` (empty when
    absent); any other file is the table itself.

    Raises:
        ConfigError: the file is not valid TOML.
    """
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise ConfigError(msg) from exc
    if path.name == PYPROJECT_FILENAME:
        return _tool_table(data) or {}
    return data
