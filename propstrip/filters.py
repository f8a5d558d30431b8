"""Which files the host hands to the rewrite engine."""

from __future__ import annotations

import re
from pathlib import Path, PurePath
from typing import Any, Dict, Iterable, Iterator, List, Optional, Pattern, Sequence, Union

from . import config
from .options import ConfigurationError, compile_matcher, join_patterns

PathPattern = Union[str, Pattern[str]]


def glob_to_regex(pattern: str) -> Pattern[str]:
    """Translate a path glob into an anchored regex.

    ``**/`` matches any number of directories (including none), ``**``
    anything, ``*`` and ``?`` stay inside one path segment.
    """
    out: List[str] = []
    i = 0
    while i < len(pattern):
        if pattern.startswith("**/", i):
            out.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            out.append(".*")
            i += 2
        elif pattern[i] == "*":
            out.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            out.append("[^/]")
            i += 1
        else:
            out.append(re.escape(pattern[i]))
            i += 1
    return re.compile("^" + "".join(out) + "$")


def _as_list(value: Union[None, PathPattern, Sequence[PathPattern]]) -> List[PathPattern]:
    if value is None:
        return []
    if isinstance(value, (str, re.Pattern)):
        return [value]
    return list(value)


def _compile(pattern: PathPattern) -> Pattern[str]:
    compiled = compile_matcher(pattern)
    if isinstance(compiled, str):
        return glob_to_regex(compiled)
    return compiled


class FileFilter:
    """Include / exclude globs plus ignored-filename patterns.

    Globs are matched against the whole POSIX form of the file id, so
    relative globs usually want a ``**/`` prefix. Regexes (compiled, or
    written ``/pattern/flags``) are searched anywhere in it.
    """

    def __init__(
        self,
        include: Union[None, PathPattern, Sequence[PathPattern]] = None,
        exclude: Union[None, PathPattern, Sequence[PathPattern]] = None,
        ignore_filenames: Optional[Iterable[str]] = None,
    ) -> None:
        self.include = [_compile(p) for p in _as_list(include)]
        self.exclude = [_compile(p) for p in _as_list(exclude)]
        self.ignore = join_patterns(ignore_filenames, re.IGNORECASE)

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "FileFilter":
        ignore = data.get("ignore_filenames", data.get("ignoreFilenames"))
        if ignore is not None and not isinstance(ignore, list):
            raise ConfigurationError("'ignore_filenames' must be a list.")
        return cls(
            include=data.get("include"),
            exclude=data.get("exclude"),
            ignore_filenames=ignore,
        )

    def __call__(self, file_id: Union[str, PurePath]) -> bool:
        path = PurePath(file_id).as_posix() if isinstance(file_id, PurePath) else file_id.replace("\\", "/")
        if self.include and not any(_matches(p, path) for p in self.include):
            return False
        if any(_matches(p, path) for p in self.exclude):
            return False
        if self.ignore is not None and self.ignore.search(path):
            return False
        return True


def _matches(pattern: Pattern[str], path: str) -> bool:
    return pattern.search(path) is not None


def discover_files(paths: Iterable[Path]) -> Iterator[Path]:
    """Expand directories into supported source files, skipping vendored dirs."""
    for path in paths:
        if path.is_dir():
            for candidate in sorted(path.rglob("*")):
                if candidate.suffix not in config.SUPPORTED_EXTENSIONS or not candidate.is_file():
                    continue
                if any(part in config.SKIP_DIRS for part in candidate.relative_to(path).parts):
                    continue
                yield candidate
        else:
            yield path
