"""Turns located sites into disjoint text edits for the active mode."""

from __future__ import annotations

import logging
from typing import Any, List, Tuple

from . import config
from .models import AnnotatedSite, Edit, EditPlan, SiteKind
from .options import Mode, RewriteOptions
from .patterns import text

logger = logging.getLogger(__name__)

CONDITIONAL_TYPES = frozenset({"ternary_expression"})


def _field_span(field_node: Any) -> Tuple[int, int]:
    """Field range including its own ``;`` terminator, which the grammar
    keeps as a separate class-body token."""
    end = field_node.end_byte
    nxt = field_node.next_sibling
    if nxt is not None and nxt.type == ";":
        end = nxt.end_byte
    return field_node.start_byte, end


class EditPlanner:
    def __init__(self, options: RewriteOptions) -> None:
        self.options = options
        self.env_check = options.env_check
        self.prop = options.property_name

    def plan(self, sites: List[AnnotatedSite]) -> EditPlan:
        plan = EditPlan()
        for site in sites:
            if site.kind is SiteKind.ASSIGNMENT:
                edits = self._plan_assignment(site)
            else:
                edits = self._plan_static_field(site)
            if not edits:
                logger.debug("No edit for %s", site)
            plan.extend(edits)
        plan.edits = _drop_nested(plan.edits)
        return plan

    # ------------------------------------------------------------------
    # Assignments: ``Foo.propTypes = {...}``
    # ------------------------------------------------------------------

    def _plan_assignment(self, site: AnnotatedSite) -> List[Edit]:
        node, span = site.node, site.span
        parent_type = site.enclosing.type if site.enclosing is not None else None
        in_conditional = parent_type in CONDITIONAL_TYPES
        mode = self.options.mode

        if mode is Mode.REMOVE:
            if in_conditional:
                return [Edit.overwrite(span.start_byte, span.end_byte, config.NO_VALUE)]
            if parent_type == "expression_statement":
                return [Edit.remove(site.enclosing.start_byte, site.enclosing.end_byte)]
            return [Edit.remove(span.start_byte, span.end_byte)]

        if mode is Mode.WRAP:
            left = text(node.child_by_field_name("left"))
            right = text(node.child_by_field_name("right"))
            replacement = f"{left} = {self.env_check} ? {right} : {config.EMPTY_OBJECT}"
            return [Edit.overwrite(node.start_byte, node.end_byte, replacement)]

        # unsafe-wrap
        if in_conditional:
            return [Edit.overwrite(span.start_byte, span.end_byte, config.NO_VALUE)]
        replacement = f"{self.env_check} ? ({text(node)}) : {config.NO_VALUE}"
        return [Edit.overwrite(span.start_byte, span.end_byte, replacement)]

    # ------------------------------------------------------------------
    # Static fields: ``static propTypes = {...}``
    # ------------------------------------------------------------------

    def _plan_static_field(self, site: AnnotatedSite) -> List[Edit]:
        start, end = _field_span(site.node)
        if self.options.mode is Mode.REMOVE:
            return [Edit.remove(start, end)]

        value = site.node.child_by_field_name("value")
        if site.class_name is None or site.class_node is None or value is None:
            logger.debug("Cannot hoist %s: no class name or value", site)
            return []

        name, value_code = site.class_name, text(value)
        if self.options.mode is Mode.WRAP:
            statement = f"\n{name}.{self.prop} = {self.env_check} ? {value_code} : {config.EMPTY_OBJECT};"
        else:
            statement = f"\n{self.env_check} ? {name}.{self.prop} = {value_code} : {config.NO_VALUE};"
        return [
            Edit.remove(start, end),
            Edit.insert_after(site.class_node.end_byte, statement),
        ]


def _drop_nested(edits: List[Edit]) -> List[Edit]:
    """Drop edits lying inside another edit's range.

    Chained assignments (``A.propTypes = B.propTypes = {}``) yield a site
    per link; the outermost edit already covers the inner ones.
    """
    kept: List[Edit] = []
    cover_start = cover_end = -1
    for edit in sorted(edits, key=lambda e: (e.start, -e.end, e.is_removal)):
        if edit.is_removal:
            if cover_start <= edit.start and edit.end <= cover_end:
                continue
            cover_start, cover_end = edit.start, edit.end
        elif cover_start < edit.start < cover_end:
            continue
        kept.append(edit)
    return kept
