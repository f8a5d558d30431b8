"""Defaults shared by the rewrite engine and the command-line host."""

from __future__ import annotations

import os
from typing import Set

CONFIG_FILENAME = "propstrip.toml"
PYPROJECT_TABLE = "propstrip"

DEFAULT_MODE = "remove"
DEFAULT_LIBRARIES = ("prop-types",)
DEFAULT_PROPERTY_NAME = "propTypes"
DEFAULT_ANNOTATION = "remove-proptypes"

# Guard inserted by the wrap modes; overridable for non-Node bundlers.
DEFAULT_ENV_CHECK = os.environ.get(
    "PROPSTRIP_ENV_CHECK", 'process.env.NODE_ENV !== "production"'
)
EMPTY_OBJECT = "{}"
NO_VALUE = "void 0"

SUPPORTED_EXTENSIONS: Set[str] = {".js", ".jsx", ".mjs", ".cjs", ".ts", ".tsx"}

SKIP_DIRS: Set[str] = {
    "node_modules", ".git", "dist", "build", "coverage",
    ".next", ".cache", ".turbo", ".venv", "__pycache__",
}
