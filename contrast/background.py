# contrast/background.py
"""
Effective background resolution.

The scene graph has no explicit "background" attribute, so the background of
an element is found by a bounded search:

1. Ancestors, nearest first, up to ``max_ancestor_depth`` hops and never
   including the page itself. The first ancestor with a visible solid fill
   wins.
2. Siblings rendered below the element (earlier in z-order), scanning
   backward from the element for at most ``max_sibling_scan`` entries. A
   sibling qualifies when it is visible, strictly overlaps the element and
   has a visible solid fill.
3. Otherwise the page background.

``resolve_background_source`` returns the node that supplies the background;
``resolve_background`` is derived from it, so the color the audit reports and
the node a background fix repaints are always the same.
"""

import logging
from typing import Optional

from .core import Color, Node
from runtime.settings import AuditSettings


logger = logging.getLogger(__name__)


def resolve_background_source(
    node: Node,
    page: Node,
    settings: Optional[AuditSettings] = None
) -> Optional[Node]:
    """
    Find the node that provides ``node``'s background.

    Args:
        node: Element whose background is wanted
        page: Document root; never returned and never inspected for fills
        settings: Search limits (defaults apply when omitted)

    Returns:
        The ancestor or sibling supplying the background, or None when the
        page background applies (including when ``node`` has no bounds).
    """
    settings = settings or AuditSettings()

    if node.bounds is None:
        return None

    ancestor = _find_filled_ancestor(node, page, settings.max_ancestor_depth)
    if ancestor is not None:
        return ancestor

    return _find_overlapping_sibling(node, settings.max_sibling_scan)


def resolve_background(
    node: Node,
    page: Node,
    settings: Optional[AuditSettings] = None
) -> Color:
    """Effective background color of ``node``. Always returns a color."""
    settings = settings or AuditSettings()

    source = resolve_background_source(node, page, settings)
    if source is not None:
        paint = source.first_visible_solid()
        if paint is not None:
            return paint.color

    return settings.page_background_color()


def _find_filled_ancestor(node: Node, page: Node, max_depth: int) -> Optional[Node]:
    current = node.parent
    depth = 0
    while current is not None and current is not page and depth < max_depth:
        depth += 1
        if current.has_visible_solid_fill():
            return current
        current = current.parent
    return None


def _find_overlapping_sibling(node: Node, max_siblings: int) -> Optional[Node]:
    parent = node.parent
    if parent is None or not parent.children:
        return None

    siblings = parent.children
    try:
        index = siblings.index(node)
    except ValueError:
        logger.warning(f"Node {node.id} is not among its parent's children; skipping sibling search")
        return None

    # Hidden siblings still count toward the scan limit
    scanned = 0
    i = index - 1
    while i >= 0 and scanned < max_siblings:
        sibling = siblings[i]
        i -= 1
        scanned += 1

        if not sibling.visible or sibling.bounds is None:
            continue
        if sibling.bounds.overlaps(node.bounds) and sibling.has_visible_solid_fill():
            return sibling

    return None
