"""Tree-sitter front end for JavaScript / JSX and TypeScript / TSX sources.

The rewrite engine only needs a positioned syntax tree; this module picks a
grammar from the file identifier, parses, and reports a syntax error as
``None`` so callers can pass the original text through untouched.
"""

from __future__ import annotations

import importlib
import logging
from pathlib import PurePath
from typing import Any, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Source kind <-> file-extension mapping
# ---------------------------------------------------------------------------
LANGUAGE_MAP: Dict[str, str] = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
}

# language -> (grammar module, attribute returning the Language capsule)
_GRAMMAR_MODULES: Dict[str, Tuple[str, str]] = {
    "javascript": ("tree_sitter_javascript", "language"),
    "typescript": ("tree_sitter_typescript", "language_typescript"),
    "tsx": ("tree_sitter_typescript", "language_tsx"),
}

_LANGUAGES: Dict[str, Any] = {}


def language_for(file_id: str) -> str:
    """Source-kind hint from the file identifier; JSX-enabled JS by default."""
    # Bundler ids may carry a query string (``Foo.jsx?used``).
    suffix = PurePath(file_id.split("?", 1)[0]).suffix.lower()
    return LANGUAGE_MAP.get(suffix, "javascript")


def _load_language(lang: str) -> Optional[Any]:
    if lang in _LANGUAGES:
        return _LANGUAGES[lang]

    from tree_sitter import Language

    mod_name, attr = _GRAMMAR_MODULES[lang]
    try:
        mod = importlib.import_module(mod_name)
        # tree-sitter >=0.22 per-language packages expose a function
        # returning the Language capsule.
        ts_lang = Language(getattr(mod, attr)())
    except ImportError:
        logger.warning(
            "Grammar package '%s' not installed for language '%s'. Install with: pip install %s",
            mod_name, lang, mod_name.replace("_", "-"),
        )
        return None
    _LANGUAGES[lang] = ts_lang
    logger.debug("Loaded tree-sitter grammar for %s", lang)
    return ts_lang


def parse_source(source: bytes, file_id: str) -> Optional[Any]:
    """Parse *source* into a tree-sitter ``Tree``.

    Returns ``None`` when no grammar is available or the text does not
    parse cleanly. Tree-sitter recovers from errors by inserting ERROR /
    MISSING nodes; splicing text around recovered nodes is unsafe, so any
    error anywhere in the tree counts as a failed parse.
    """
    from tree_sitter import Parser as TSParser

    lang = language_for(file_id)
    ts_lang = _load_language(lang)
    if ts_lang is None:
        return None

    # Parsers are stateful; one per call.
    tree = TSParser(ts_lang).parse(source)
    if tree.root_node.has_error:
        logger.debug("Syntax error in %s (parsed as %s)", file_id, lang)
        return None
    return tree
