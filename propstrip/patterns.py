"""Structural predicates over tree-sitter nodes. No state, no errors."""

from __future__ import annotations

from typing import Any, Iterator, Optional

# Nodes that carry no meaning for the matchers.
_TRIVIA = frozenset({"comment"})


def text(node: Any) -> str:
    return node.text.decode("utf-8") if node is not None else ""


def is_identifier(node: Any, name: Optional[str] = None) -> bool:
    if node is None or node.type != "identifier":
        return False
    return name is None or text(node) == name


def meaningful_children(node: Any) -> Iterator[Any]:
    """Named children minus comments."""
    for child in node.named_children:
        if child.type not in _TRIVIA:
            yield child


def first_meaningful_child(node: Any) -> Optional[Any]:
    return next(meaningful_children(node), None)


def matches_qualified_pattern(node: Any, pattern: str) -> bool:
    """True iff *node* is exactly the member chain ``A.B.C`` for ``"A.B.C"``.

    Walks the chain from its rightmost property inward; the innermost
    object must be the identifier ``A``. Shorter and longer chains fail.
    """
    parts = pattern.split(".")
    if len(parts) < 2 or node is None or node.type != "member_expression":
        return False

    current = node
    for part in reversed(parts[1:]):
        if current is None or current.type != "member_expression":
            return False
        prop = current.child_by_field_name("property")
        if prop is None or prop.type != "property_identifier" or text(prop) != part:
            return False
        current = current.child_by_field_name("object")
    return is_identifier(current, parts[0])


def comment_body(node: Any) -> str:
    raw = text(node)
    if raw.startswith("/*"):
        raw = raw[2:-2] if raw.endswith("*/") else raw[2:]
    elif raw.startswith("//"):
        raw = raw[2:]
    return raw.strip()


def is_annotated(node: Any, marker: str) -> bool:
    """True iff a comment directly trailing *node* reads exactly *marker*."""
    if node is None:
        return False
    sibling = node.next_sibling
    while sibling is not None and sibling.type == "comment":
        if comment_body(sibling) == marker:
            return True
        sibling = sibling.next_sibling
    return False
