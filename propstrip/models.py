"""Core data models shared by the locator, planner and rewriter."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Tuple

from .rewriter import PositionMap


class SiteKind(str, Enum):
    ASSIGNMENT = "assignment"
    STATIC_FIELD = "static_field"


class EditKind(str, Enum):
    OVERWRITE = "overwrite"
    REMOVE = "remove"
    INSERT = "insert"


class RewriteStatus(str, Enum):
    CHANGED = "changed"
    UNCHANGED = "unchanged"
    PARSE_FAILED = "parse_failed"


@dataclass
class AnnotatedSite:
    """A located assignment or static field plus the facts derived for it."""
    kind: SiteKind
    node: Any
    annotated: bool = False
    component_name: Optional[str] = None
    is_component: bool = False
    enclosing: Any = None
    outer: Any = None
    class_node: Any = None
    class_name: Optional[str] = None

    @property
    def span(self) -> Any:
        """The node an edit replaces: the site itself or its outermost parentheses."""
        return self.outer if self.outer is not None else self.node

    @property
    def start(self) -> int:
        return self.node.start_byte

    @property
    def end(self) -> int:
        return self.node.end_byte

    @property
    def line(self) -> int:
        return self.node.start_point[0] + 1

    def __str__(self) -> str:
        owner = self.class_name or self.component_name or "?"
        return f"{self.kind.value} on {owner} at line {self.line}"


@dataclass(frozen=True)
class Edit:
    """One splice over the original text.

    ``OVERWRITE`` and ``REMOVE`` cover ``[start, end)``; ``INSERT`` is
    anchored at ``start`` (== ``end``) and adds ``text`` right after it.
    """
    kind: EditKind
    start: int
    end: int
    text: str = ""

    @classmethod
    def overwrite(cls, start: int, end: int, text: str) -> "Edit":
        return cls(EditKind.OVERWRITE, start, end, text)

    @classmethod
    def remove(cls, start: int, end: int) -> "Edit":
        return cls(EditKind.REMOVE, start, end)

    @classmethod
    def insert_after(cls, offset: int, text: str) -> "Edit":
        return cls(EditKind.INSERT, offset, offset, text)

    @property
    def is_removal(self) -> bool:
        """True for edits whose original range disappears from the output."""
        return self.kind is not EditKind.INSERT


@dataclass
class EditPlan:
    edits: List[Edit] = field(default_factory=list)

    def add(self, edit: Edit) -> None:
        self.edits.append(edit)

    def extend(self, edits: List[Edit]) -> None:
        self.edits.extend(edits)

    def removal_ranges(self) -> List[Tuple[int, int]]:
        return sorted((e.start, e.end) for e in self.edits if e.is_removal)

    def __len__(self) -> int:
        return len(self.edits)


@dataclass
class RewriteResult:
    """Outcome of one :func:`propstrip.transform.rewrite` call."""
    status: RewriteStatus
    file_id: str
    code: Optional[str] = None
    position_map: Optional[PositionMap] = None
    sites: List[AnnotatedSite] = field(default_factory=list)
    removed_imports: List[Tuple[int, int]] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.status is RewriteStatus.CHANGED

    def source_map(self, source: str) -> dict:
        """Source Map v3 for a changed result."""
        if self.position_map is None or self.code is None:
            raise ValueError(f"No rewritten output for {self.file_id}")
        return self.position_map.to_source_map(self.file_id, source, self.code)
