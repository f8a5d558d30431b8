"""Single-pass discovery of type-declaration sites.

One pre-order walk over the tree builds the parent index, registers
components as their declarations are met, records tracked imports, and
collects every assignment / static field that targets the property.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .classifier import is_component_class, is_stateless_component
from .models import AnnotatedSite, SiteKind
from .options import RewriteOptions
from .patterns import is_annotated, is_identifier, text

logger = logging.getLogger(__name__)

CLASS_TYPES = frozenset({"class_declaration", "abstract_class_declaration", "class"})
FIELD_TYPES = frozenset({"field_definition", "public_field_definition"})


@dataclass
class LocatorResult:
    sites: List[AnnotatedSite] = field(default_factory=list)
    parent_map: Dict[int, Any] = field(default_factory=dict)
    registry: Dict[str, Any] = field(default_factory=dict)
    import_bindings: Dict[str, Tuple[int, int]] = field(default_factory=dict)

    def parent(self, node: Any) -> Optional[Any]:
        return self.parent_map.get(node.id)


def string_value(node: Any) -> str:
    raw = text(node)
    if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in "'\"":
        return raw[1:-1]
    return raw


def import_bindings(import_node: Any) -> List[str]:
    """Local names introduced by an import declaration."""
    names: List[str] = []
    for clause in import_node.named_children:
        if clause.type != "import_clause":
            continue
        for part in clause.named_children:
            if part.type == "identifier":
                names.append(text(part))
            elif part.type == "namespace_import":
                names.extend(text(c) for c in part.named_children if c.type == "identifier")
            elif part.type == "named_imports":
                for spec in part.named_children:
                    if spec.type != "import_specifier":
                        continue
                    local = spec.child_by_field_name("alias") or spec.child_by_field_name("name")
                    if local is not None and local.type == "identifier":
                        names.append(text(local))
    return names


class SiteLocator:
    """Walks one tree and returns every site the edit planner may act on."""

    def __init__(self, options: RewriteOptions) -> None:
        self.options = options

    def locate(self, root: Any) -> LocatorResult:
        result = LocatorResult()
        stack: List[Tuple[Any, Optional[Any]]] = [(root, None)]
        while stack:
            node, parent = stack.pop()
            if parent is not None:
                result.parent_map[node.id] = parent
            self._enter(node, parent, result)
            children = node.children
            for child in reversed(children):
                stack.append((child, node))
        return result

    # ------------------------------------------------------------------
    # Per-node dispatch
    # ------------------------------------------------------------------

    def _enter(self, node: Any, parent: Optional[Any], result: LocatorResult) -> None:
        kind = node.type
        if kind == "import_statement":
            if self.options.elide_imports:
                self._record_import(node, result)
        elif kind in ("class_declaration", "abstract_class_declaration"):
            if is_component_class(node, self.options):
                self._register(text(node.child_by_field_name("name")), node, result)
        elif kind == "function_declaration":
            name = node.child_by_field_name("name")
            if name is not None and is_stateless_component(node):
                self._register(text(name), node, result)
        elif kind == "variable_declarator":
            name = node.child_by_field_name("name")
            if is_identifier(name) and is_stateless_component(node):
                self._register(text(name), node, result)
        elif kind == "assignment_expression":
            self._check_assignment(node, parent, result)
        elif kind in FIELD_TYPES:
            self._check_static_field(node, parent, result)

    def _register(self, name: str, node: Any, result: LocatorResult) -> None:
        logger.debug("Component %s (%s, line %d)", name, node.type, node.start_point[0] + 1)
        result.registry[name] = node

    def _record_import(self, node: Any, result: LocatorResult) -> None:
        source = node.child_by_field_name("source")
        if source is None or not self.options.is_tracked_library(string_value(source)):
            return
        span = (node.start_byte, node.end_byte)
        for name in import_bindings(node):
            result.import_bindings[name] = span

    # ------------------------------------------------------------------
    # Sites
    # ------------------------------------------------------------------

    def _check_assignment(self, node: Any, parent: Optional[Any], result: LocatorResult) -> None:
        left = node.child_by_field_name("left")
        if left is None or left.type != "member_expression":
            return
        prop = left.child_by_field_name("property")
        if prop is None or prop.type != "property_identifier" or text(prop) != self.options.property_name:
            return

        annotated = is_annotated(left, self.options.annotation)
        obj = left.child_by_field_name("object")
        name = text(obj) if is_identifier(obj) else None
        is_component = name is not None and name in result.registry

        if not (annotated or is_component):
            logger.debug("Skipping %s.%s at line %d: not a component", name or "<expr>",
                         self.options.property_name, node.start_point[0] + 1)
            return

        # Parentheses are kept in the tree; plan against what lies outside them.
        outer = None
        while parent is not None and parent.type == "parenthesized_expression":
            outer = parent
            parent = result.parent(parent)

        result.sites.append(AnnotatedSite(
            kind=SiteKind.ASSIGNMENT,
            node=node,
            annotated=annotated,
            component_name=name,
            is_component=is_component,
            enclosing=parent,
            outer=outer,
        ))

    def _check_static_field(self, node: Any, parent: Optional[Any], result: LocatorResult) -> None:
        if parent is None or parent.type != "class_body":
            return
        if not any(child.type == "static" for child in node.children):
            return
        key = node.child_by_field_name("property") or node.child_by_field_name("name")
        if key is None or key.type != "property_identifier" or text(key) != self.options.property_name:
            return

        class_node = self._enclosing_class(parent, result)
        class_name = None
        if class_node is not None and class_node.type != "class":
            name = class_node.child_by_field_name("name")
            class_name = text(name) if name is not None else None

        result.sites.append(AnnotatedSite(
            kind=SiteKind.STATIC_FIELD,
            node=node,
            component_name=class_name,
            is_component=class_name is not None and class_name in result.registry,
            enclosing=parent,
            class_node=class_node,
            class_name=class_name,
        ))

    @staticmethod
    def _enclosing_class(node: Any, result: LocatorResult) -> Optional[Any]:
        current: Optional[Any] = node
        while current is not None:
            if current.type in CLASS_TYPES:
                return current
            current = result.parent(current)
        return None
