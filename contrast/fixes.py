# contrast/fixes.py
"""
Bulk color correction for every node that contributed to a ContrastIssue.

Each node is handled by its own task and all tasks are joined before the
call returns, even when one of them fails. Nodes that vanished since the
scan, and backgrounds without a providing node, are skipped silently. Only
a rejected host call fails the whole operation.
"""

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import List, Optional

from errors import (
    ContrastAuditError,
    FixApplicationError,
    create_error_context,
    log_error_with_context,
)
from runtime.retry import lookup_node
from runtime.settings import AuditSettings

from .background import resolve_background_source
from .color import hex_to_rgb
from .core import Color, ContrastIssue, Paint, PaintType, solid_paint
from .document import DocumentProvider


logger = logging.getLogger(__name__)


@dataclass
class FixSummary:
    nodes_updated: int = 0
    nodes_skipped: int = 0
    backgrounds_updated: int = 0
    attempted: bool = False


@dataclass
class _NodeOutcome:
    found: bool
    background_updated: bool = False


def recolor_foreground(fills: Optional[List[Paint]], color: Color) -> Optional[List[Paint]]:
    """Recolor every visible SOLID paint; other paints are left as they are."""
    if fills is None:
        return None
    return [
        replace(paint, color=color) if paint.type == PaintType.SOLID and paint.visible else paint
        for paint in fills
    ]


def recolor_background(fills: Optional[List[Paint]], color: Color) -> List[Paint]:
    """
    Recolor the solid paint that supplies a node's background color.

    The first visible SOLID paint is preferred, then any SOLID paint. A node
    without one gets a single new SOLID paint.
    """
    paints = list(fills or [])
    target = next((i for i, p in enumerate(paints) if p.is_visible_solid), None)
    if target is None:
        target = next((i for i, p in enumerate(paints) if p.type == PaintType.SOLID), None)
    if target is None:
        return [solid_paint(color)]

    paints[target] = replace(paints[target], color=color)
    return paints


async def apply_fix(
    issue: ContrastIssue,
    new_fg_hex: Optional[str],
    new_bg_hex: Optional[str],
    document: DocumentProvider,
    settings: Optional[AuditSettings] = None
) -> FixSummary:
    """
    Apply replacement colors to all nodes of ``issue``.

    Args:
        issue: Issue record from the latest scan
        new_fg_hex: Replacement foreground, or None to keep foregrounds
        new_bg_hex: Replacement background, or None to keep backgrounds
        document: Host document provider
        settings: Resolver limits and lookup retry policy

    Returns:
        FixSummary; ``attempted`` is False when neither hex parsed.

    Raises:
        FixApplicationError: If a host call rejected the operation
    """
    settings = settings or AuditSettings()
    new_fg = hex_to_rgb(new_fg_hex) if new_fg_hex else None
    new_bg = hex_to_rgb(new_bg_hex) if new_bg_hex else None

    if new_fg is None and new_bg is None:
        logger.info(f"No usable colors in fix request for {issue.key}; nothing applied")
        return FixSummary()

    page = document.page
    tasks = [
        _fix_node(node_id, new_fg, new_bg, document, page, settings)
        for node_id in issue.node_ids
    ]

    # Every node task settles before anything is reported
    outcomes = await asyncio.gather(*tasks, return_exceptions=True)
    failures = [outcome for outcome in outcomes if isinstance(outcome, BaseException)]

    if failures:
        e = failures[0]
        if not isinstance(e, Exception):
            raise e
        for extra in failures[1:]:
            logger.warning(f"Additional failure while fixing {issue.key}: {extra}")

        context = create_error_context(
            component="Fix Application",
            operation="apply_fix",
            issue_key=issue.key,
            node_count=len(issue.node_ids)
        )
        message = e.message if isinstance(e, ContrastAuditError) else str(e)
        error = FixApplicationError(
            message=message,
            issue_key=issue.key,
            error_context=context,
            cause=e
        )
        log_error_with_context(error, context)
        raise error from e

    summary = FixSummary(attempted=True)
    for outcome in outcomes:
        if outcome.found:
            summary.nodes_updated += 1
        else:
            summary.nodes_skipped += 1
        if outcome.background_updated:
            summary.backgrounds_updated += 1

    logger.info(
        f"Applied fix to {summary.nodes_updated} node(s) for {issue.key} "
        f"(skipped: {summary.nodes_skipped}, backgrounds: {summary.backgrounds_updated})"
    )
    return summary


async def _fix_node(
    node_id: str,
    new_fg: Optional[Color],
    new_bg: Optional[Color],
    document: DocumentProvider,
    page,
    settings: AuditSettings
) -> _NodeOutcome:
    node = await lookup_node(document, node_id, settings)
    if node is None:
        logger.debug(f"Node {node_id} no longer exists; skipped")
        return _NodeOutcome(found=False)

    if new_fg is not None and node.fills is not None:
        document.set_fills(node, recolor_foreground(node.fills, new_fg))

    if new_bg is None:
        return _NodeOutcome(found=True)

    source = resolve_background_source(node, page, settings)
    if source is None:
        logger.debug(f"Node {node_id} sits on the page background; no node to repaint")
        return _NodeOutcome(found=True)

    background_node = await lookup_node(document, source.id, settings)
    if background_node is None:
        return _NodeOutcome(found=True)

    document.set_fills(background_node, recolor_background(background_node.fills, new_bg))
    return _NodeOutcome(found=True, background_updated=True)
