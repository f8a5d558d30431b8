"""The rewrite operation exposed to hosts."""

from __future__ import annotations

import logging

from .liveness import ImportLivenessAnalyzer
from .locator import SiteLocator
from .models import Edit, EditKind, EditPlan, RewriteResult, RewriteStatus
from .options import RewriteOptions
from .parser import parse_source
from .planner import EditPlanner
from .rewriter import SpliceBuffer

logger = logging.getLogger(__name__)


def apply_plan(buffer: SpliceBuffer, plan: EditPlan) -> None:
    for edit in plan.edits:
        if edit.kind is EditKind.OVERWRITE:
            buffer.overwrite(edit.start, edit.end, edit.text)
        elif edit.kind is EditKind.REMOVE:
            buffer.remove(edit.start, edit.end)
        else:
            buffer.append_left(edit.start, edit.text)


def rewrite(source: str, file_id: str, options: RewriteOptions) -> RewriteResult:
    """Strip or wrap type-declaration sites in one module.

    Raises:
        ConfigurationError: for an invalid option combination, before
            anything is parsed.

    Returns:
        A :class:`RewriteResult` whose status is ``changed`` (with code and
        position map), ``unchanged`` or ``parse_failed``. Hosts pass the
        original text through for the latter two.
    """
    options.validate()

    source_bytes = source.encode("utf-8")
    tree = parse_source(source_bytes, file_id)
    if tree is None:
        return RewriteResult(RewriteStatus.PARSE_FAILED, file_id)
    root = tree.root_node

    located = SiteLocator(options).locate(root)
    plan = EditPlanner(options).plan(located.sites)

    removed_imports = []
    if options.elide_imports and located.import_bindings:
        analyzer = ImportLivenessAnalyzer(located.import_bindings)
        removed_imports = analyzer.dead_imports(root, plan.removal_ranges())
        plan.extend([Edit.remove(start, end) for start, end in removed_imports])

    buffer = SpliceBuffer(source_bytes)
    apply_plan(buffer, plan)
    if not buffer.has_changed():
        return RewriteResult(RewriteStatus.UNCHANGED, file_id, sites=located.sites)

    code, position_map = buffer.render()
    logger.debug("%s: %d site(s), %d edit(s), %d import(s) removed",
                 file_id, len(located.sites), len(plan), len(removed_imports))
    return RewriteResult(
        RewriteStatus.CHANGED,
        file_id,
        code=code,
        position_map=position_map,
        sites=located.sites,
        removed_imports=removed_imports,
    )
