"""Heuristic component detection.

Class components are recognised by their base class, function components
by the UI they return. Nothing is resolved across modules: an imported
``Component`` is trusted by name alone.
"""

from __future__ import annotations

from typing import Any, Optional

from .options import RewriteOptions
from .patterns import first_meaningful_child, is_identifier, matches_qualified_pattern, text

UI_ELEMENT_TYPES = frozenset({"jsx_element", "jsx_self_closing_element"})

FUNCTION_TYPES = frozenset({
    "function_declaration",
    "function_expression",
    "function",
    "generator_function_declaration",
    "generator_function",
    "arrow_function",
    "method_definition",
})

CLASS_BASE_PATTERNS = ("React.Component", "React.PureComponent")
CLASS_BASE_NAMES = frozenset({"Component", "PureComponent"})

ELEMENT_FACTORY_PATTERNS = ("React.createElement", "React.cloneElement")
ELEMENT_FACTORY_NAMES = frozenset({"cloneElement"})

WRAPPER_PATTERNS = ("React.memo", "React.forwardRef")
WRAPPER_NAMES = frozenset({"memo", "forwardRef"})


# ---------------------------------------------------------------------------
# Class components
# ---------------------------------------------------------------------------

def superclass_of(class_node: Any) -> Optional[Any]:
    """Base-class expression of a class, or ``None``.

    JavaScript puts the expression straight under ``class_heritage``;
    TypeScript wraps it in an ``extends_clause`` next to its type arguments.
    """
    for child in class_node.children:
        if child.type != "class_heritage":
            continue
        first = first_meaningful_child(child)
        if first is not None and first.type == "extends_clause":
            first = first.child_by_field_name("value")
        elif first is not None and first.type == "implements_clause":
            return None
        # ``React.Component<Props>`` may come back as an instantiation.
        while first is not None and first.type == "instantiation_expression":
            first = first_meaningful_child(first)
        return first
    return None


def is_component_base(superclass: Optional[Any], options: RewriteOptions) -> bool:
    if superclass is None:
        return False
    if any(matches_qualified_pattern(superclass, p) for p in CLASS_BASE_PATTERNS):
        return True
    if is_identifier(superclass):
        name = text(superclass)
        if name in CLASS_BASE_NAMES:
            return True
        matcher = options.class_name_matcher
        if matcher is not None and matcher.search(name):
            return True
    return False


def is_component_class(class_node: Any, options: RewriteOptions) -> bool:
    if class_node.child_by_field_name("name") is None:
        return False
    return is_component_base(superclass_of(class_node), options)


# ---------------------------------------------------------------------------
# Function components
# ---------------------------------------------------------------------------

def _is_element_factory_call(node: Any) -> bool:
    callee = node.child_by_field_name("function")
    if callee is None:
        return False
    if any(matches_qualified_pattern(callee, p) for p in ELEMENT_FACTORY_PATTERNS):
        return True
    return is_identifier(callee) and text(callee) in ELEMENT_FACTORY_NAMES


def constructs_ui(node: Optional[Any]) -> bool:
    """True iff JSX or an element factory call appears anywhere in *node*."""
    if node is None:
        return False
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type in UI_ELEMENT_TYPES:
            return True
        if current.type == "call_expression" and _is_element_factory_call(current):
            return True
        stack.extend(current.named_children)
    return False


def returns_ui(func: Any) -> bool:
    """True iff *func* itself returns UI.

    Expression-bodied arrows are tested directly. Otherwise only the
    function's own ``return`` statements count: nested functions are not
    entered, so a callback building JSX does not make its host a component.
    """
    body = func.child_by_field_name("body")
    if body is None:
        return False
    if func.type == "arrow_function" and body.type != "statement_block":
        return constructs_ui(body)

    stack = list(body.named_children)
    while stack:
        current = stack.pop()
        if current.type in FUNCTION_TYPES:
            continue
        if current.type == "return_statement":
            if constructs_ui(first_meaningful_child(current)):
                return True
            continue
        stack.extend(current.named_children)
    return False


def _is_wrapper_call(node: Any) -> bool:
    callee = node.child_by_field_name("function")
    if callee is None:
        return False
    if any(matches_qualified_pattern(callee, p) for p in WRAPPER_PATTERNS):
        return True
    return is_identifier(callee) and text(callee) in WRAPPER_NAMES


def is_wrapped_component(call: Any) -> bool:
    """``memo(fn)`` / ``forwardRef(fn)`` (possibly nested) around a UI function."""
    if not _is_wrapper_call(call):
        return False
    args = call.child_by_field_name("arguments")
    inner = first_meaningful_child(args) if args is not None else None
    if inner is None:
        return False
    if inner.type in FUNCTION_TYPES:
        return returns_ui(inner)
    if inner.type == "call_expression":
        return is_wrapped_component(inner)
    return False


def is_stateless_component(node: Any) -> bool:
    """Classify a function declaration or a variable declarator."""
    if node.type == "function_declaration":
        return returns_ui(node)
    if node.type != "variable_declarator":
        return False

    value = node.child_by_field_name("value")
    if value is None:
        return False
    if value.type in ("arrow_function", "function_expression", "function"):
        return returns_ui(value)
    if value.type == "call_expression":
        return is_wrapped_component(value)
    return False
