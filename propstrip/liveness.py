"""Decides which tracked imports survive once their sites are removed.

Whether a binding is still referenced can only be answered after every
removal range is known, so this runs as a second walk over the same tree,
after the edit plan is final.
"""

from __future__ import annotations

import bisect
import logging
from collections import defaultdict
from typing import Any, Dict, List, Set, Tuple

from .patterns import text

logger = logging.getLogger(__name__)

REFERENCE_TYPES = frozenset({"identifier", "shorthand_property_identifier"})
IMPORT_BINDING_PARENTS = frozenset({"import_clause", "import_specifier", "namespace_import"})


class ImportLivenessAnalyzer:
    def __init__(self, bindings: Dict[str, Tuple[int, int]]) -> None:
        self.bindings = bindings

    def live_bindings(self, root: Any, removal_ranges: List[Tuple[int, int]]) -> Set[str]:
        """Names referenced at least once outside every removal range."""
        ranges = sorted(removal_ranges)
        starts = [start for start, _ in ranges]
        live: Set[str] = set()
        if not self.bindings:
            return live

        stack: List[Tuple[Any, Any]] = [(root, None)]
        while stack:
            node, parent = stack.pop()
            if node.type in REFERENCE_TYPES:
                name = text(node)
                if name in self.bindings and name not in live:
                    if parent is None or parent.type not in IMPORT_BINDING_PARENTS:
                        if not _within(node.start_byte, ranges, starts):
                            live.add(name)
                continue
            stack.extend((child, node) for child in node.children)
        return live

    def dead_imports(self, root: Any, removal_ranges: List[Tuple[int, int]]) -> List[Tuple[int, int]]:
        """Import declaration ranges none of whose bindings is live."""
        live = self.live_bindings(root, removal_ranges)
        by_declaration: Dict[Tuple[int, int], List[str]] = defaultdict(list)
        for name, span in self.bindings.items():
            by_declaration[span].append(name)

        dead = []
        for span, names in sorted(by_declaration.items()):
            if any(name in live for name in names):
                logger.debug("Keeping import at %d: %s still referenced", span[0],
                             ", ".join(n for n in names if n in live))
                continue
            dead.append(span)
        return dead


def _within(offset: int, ranges: List[Tuple[int, int]], starts: List[int]) -> bool:
    idx = bisect.bisect_right(starts, offset) - 1
    return idx >= 0 and ranges[idx][0] <= offset < ranges[idx][1]
