"""Rewrite options: normalization of user settings into an immutable object."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Pattern, Tuple, Union

from . import config

LibraryMatcher = Union[str, Pattern[str]]

_REGEX_LITERAL = re.compile(r"^/(?P<body>.+)/(?P<flags>[imsx]*)$")
_FLAG_MAP = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL, "x": re.VERBOSE}


class ConfigurationError(ValueError):
    """Raised for option combinations the engine refuses to run with."""


class Mode(str, Enum):
    REMOVE = "remove"
    WRAP = "wrap"
    UNSAFE_WRAP = "unsafe-wrap"

    @classmethod
    def parse(cls, value: Union[str, "Mode", None]) -> "Mode":
        if value is None:
            return cls(config.DEFAULT_MODE)
        if isinstance(value, Mode):
            return value
        try:
            return cls(value)
        except ValueError:
            valid = ", ".join(m.value for m in cls)
            raise ConfigurationError(f"Unknown mode '{value}'. Expected one of: {valid}.") from None


def compile_matcher(value: LibraryMatcher) -> LibraryMatcher:
    """Turn ``"/pattern/flags"`` strings into compiled regexes.

    Plain strings are kept as exact names; compiled patterns pass through.
    """
    if not isinstance(value, str):
        return value
    match = _REGEX_LITERAL.match(value)
    if match is None:
        return value
    flags = 0
    for letter in match.group("flags"):
        flags |= _FLAG_MAP[letter]
    try:
        return re.compile(match.group("body"), flags)
    except re.error as exc:
        raise ConfigurationError(f"Invalid pattern {value!r}: {exc}") from exc


def join_patterns(patterns: Optional[Iterable[str]], flags: int = 0) -> Optional[Pattern[str]]:
    """Compile a list of patterns into one alternation, or ``None`` if empty."""
    items = [p for p in (patterns or []) if p]
    if not items:
        return None
    try:
        return re.compile("|".join(items), flags)
    except re.error as exc:
        raise ConfigurationError(f"Invalid pattern list {items!r}: {exc}") from exc


@dataclass(frozen=True)
class RewriteOptions:
    """File-independent configuration, read-only for every rewrite call."""

    mode: Mode = Mode.REMOVE
    remove_import: bool = False
    libraries: Tuple[LibraryMatcher, ...] = config.DEFAULT_LIBRARIES
    class_name_matcher: Optional[Pattern[str]] = None
    property_name: str = config.DEFAULT_PROPERTY_NAME
    annotation: str = config.DEFAULT_ANNOTATION
    env_check: str = field(default_factory=lambda: config.DEFAULT_ENV_CHECK)

    def validate(self) -> None:
        if self.remove_import and self.mode is not Mode.REMOVE:
            raise ConfigurationError(
                "removeImport = true and mode != 'remove' cannot be used at the same time "
                f"(got mode '{self.mode.value}')."
            )

    @property
    def elide_imports(self) -> bool:
        return self.remove_import and self.mode is Mode.REMOVE

    def is_tracked_library(self, source: str) -> bool:
        for lib in self.libraries:
            if isinstance(lib, str):
                if source == lib:
                    return True
            elif lib.search(source):
                return True
        return False

    def describe(self) -> Dict[str, Any]:
        """Plain-data view used by ``show-config``."""
        return {
            "mode": self.mode.value,
            "remove_import": self.remove_import,
            "libraries": [lib if isinstance(lib, str) else f"/{lib.pattern}/" for lib in self.libraries],
            "class_name_matcher": self.class_name_matcher.pattern if self.class_name_matcher else None,
            "property_name": self.property_name,
            "annotation": self.annotation,
            "env_check": self.env_check,
        }


def normalize_options(
    mode: Union[str, Mode, None] = None,
    remove_import: Optional[bool] = None,
    additional_libraries: Optional[Iterable[LibraryMatcher]] = None,
    class_name_matchers: Optional[Iterable[str]] = None,
    property_name: Optional[str] = None,
    annotation: Optional[str] = None,
    env_check: Optional[str] = None,
) -> RewriteOptions:
    """Resolve user-level settings into :class:`RewriteOptions`.

    The mode/remove_import combination is *not* checked here; it is
    checked by :func:`propstrip.transform.rewrite` before parsing so that
    every call with a bad combination fails, whatever its input.
    """
    libraries = []
    for lib in (*config.DEFAULT_LIBRARIES, *(additional_libraries or [])):
        compiled = compile_matcher(lib)
        if compiled not in libraries:
            libraries.append(compiled)

    return RewriteOptions(
        mode=Mode.parse(mode),
        remove_import=bool(remove_import),
        libraries=tuple(libraries),
        class_name_matcher=join_patterns(class_name_matchers),
        property_name=property_name or config.DEFAULT_PROPERTY_NAME,
        annotation=annotation or config.DEFAULT_ANNOTATION,
        env_check=env_check or config.DEFAULT_ENV_CHECK,
    )


def options_from_mapping(data: Dict[str, Any]) -> RewriteOptions:
    """Build options from a config-file table (snake_case or camelCase keys)."""

    def pick(*keys: str) -> Any:
        for key in keys:
            if key in data:
                return data[key]
        return None

    libraries = pick("additional_libraries", "additionalLibraries")
    matchers = pick("class_name_matchers", "classNameMatchers")
    for name, value in (("additional_libraries", libraries), ("class_name_matchers", matchers)):
        if value is not None and not isinstance(value, list):
            raise ConfigurationError(f"'{name}' must be a list, got {type(value).__name__}.")

    return normalize_options(
        mode=pick("mode"),
        remove_import=pick("remove_import", "removeImport"),
        additional_libraries=libraries,
        class_name_matchers=matchers,
        property_name=pick("property_name", "propertyName"),
        annotation=pick("annotation"),
        env_check=pick("env_check", "envCheck"),
    )
