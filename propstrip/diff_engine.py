"""DiffEngine for previewing and writing rewritten modules."""

from __future__ import annotations

import difflib
import json
from pathlib import Path, PurePath
from typing import Optional

from .models import RewriteResult


class DiffEngine:
    """Renders diffs for rewritten files and writes them back."""

    def create_diff(self, result: RewriteResult, original: str) -> str:
        """Unified diff of a changed result against its input.

        Headers use the result's file id as ``a/<id>`` and ``b/<id>``.
        An unchanged or unparsed result has an empty diff.
        """
        if not result.changed or result.code is None:
            return ""
        name = PurePath(result.file_id).as_posix()
        return "".join(difflib.unified_diff(
            original.splitlines(keepends=True),
            result.code.splitlines(keepends=True),
            fromfile=f"a/{name}",
            tofile=f"b/{name}",
        ))

    def write_result(
        self,
        path: Path,
        result: RewriteResult,
        original: str,
        source_map: bool = False,
    ) -> Optional[Path]:
        """Write a changed result over *path*.

        Args:
            path: File to overwrite
            result: Outcome of ``rewrite`` for that file
            original: Text the result was computed from
            source_map: Also write ``<file>.map`` next to it

        Returns:
            Path of the written source map, if any

        Raises:
            OSError: if either file cannot be written.
        """
        if not result.changed or result.code is None:
            return None

        path.write_bytes(result.code.encode("utf-8"))
        if not source_map:
            return None

        map_path = path.with_name(path.name + ".map")
        map_path.write_text(json.dumps(result.source_map(original)), encoding="utf-8")
        return map_path
