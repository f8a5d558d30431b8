"""Configuration file loading for the propstrip CLI using TOML files.

Lookup order: an explicit ``--config`` path, ``propstrip.toml`` in the
working directory, then the ``[tool.propstrip]`` table of ``pyproject.toml``.
A dedicated file may hold its settings at top level or under ``[propstrip]``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import toml

from .config import CONFIG_FILENAME, PYPROJECT_TABLE
from .filters import FileFilter
from .options import ConfigurationError, RewriteOptions, options_from_mapping

logger = logging.getLogger(__name__)


def find_config_file(start: Optional[Path] = None) -> Optional[Path]:
    base = start or Path.cwd()
    for candidate in (base / CONFIG_FILENAME, base / "pyproject.toml"):
        if candidate.is_file():
            return candidate
    return None


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load the settings table.

    Returns an empty dict when no file is found, or when a
    ``pyproject.toml`` has no ``[tool.propstrip]`` table.
    """
    explicit = path is not None
    path = path or find_config_file()
    if path is None:
        return {}
    if explicit and not path.is_file():
        raise ConfigurationError(f"Config file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = toml.load(f)
    except toml.TomlDecodeError as exc:
        raise ConfigurationError(f"Invalid TOML in {path}: {exc}") from exc

    if path.name == "pyproject.toml":
        table = data.get("tool", {}).get(PYPROJECT_TABLE, {})
    else:
        table = data.get(PYPROJECT_TABLE, data)
    logger.debug("Loaded configuration from %s: %s", path, table)
    return dict(table)


def merge_overrides(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """CLI flags win over file values; ``None`` / empty lists mean "not given"."""
    merged = dict(base)
    for key, value in overrides.items():
        if value is None or (isinstance(value, (list, tuple)) and not value):
            continue
        merged[key] = list(value) if isinstance(value, tuple) else value
    return merged


def resolve(settings: Dict[str, Any]) -> Tuple[RewriteOptions, FileFilter]:
    """Engine options and host file filter from one settings table."""
    return options_from_mapping(settings), FileFilter.from_mapping(settings)
