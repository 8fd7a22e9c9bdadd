# contrast/traversal.py
"""
Candidate collection over a selection of scene-graph subtrees.

The walk is depth first in z-order and shares one ``TraversalContext`` across
every selected root, so the visit and candidate limits bound the whole scan
rather than each subtree. Reaching either limit stops the walk; whatever was
collected so far is kept and the result is flagged as truncated.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import List, Iterable, Optional

from .background import resolve_background
from .categories import ContrastRequirement, classify_node
from .core import Color, Node, NodeRole
from runtime.settings import AuditSettings


logger = logging.getLogger(__name__)


@dataclass
class ContrastCandidate:
    """One audited element with its resolved color pair."""
    node: Node
    fg: Color
    bg: Color
    is_text: bool
    is_large: bool
    requirement: ContrastRequirement

    @property
    def node_id(self) -> str:
        return self.node.id


@dataclass
class TraversalContext:
    """
    Counters and limits for a single ``collect`` call.

    Attributes:
        max_visits: Nodes that may be touched before the walk aborts
        max_candidates: Candidates that may be collected before the walk aborts
        visited: Nodes touched so far, hidden ones included
        collected: Candidates collected so far
        aborted: Set once a limit stopped the walk
    """
    max_visits: int
    max_candidates: int
    visited: int = 0
    collected: int = 0
    aborted: bool = False

    @classmethod
    def from_settings(cls, settings: AuditSettings) -> "TraversalContext":
        return cls(max_visits=settings.max_visits, max_candidates=settings.max_candidates)

    def enter(self, node: Node) -> bool:
        """Count a visit; False means the walk must stop here."""
        self.visited += 1
        if self.visited > self.max_visits or self.collected >= self.max_candidates:
            self.aborted = True
            return False
        return True

    @property
    def truncated(self) -> bool:
        return self.aborted or self.collected >= self.max_candidates


@dataclass
class CollectionResult:
    items: List[ContrastCandidate] = field(default_factory=list)
    truncated: bool = False
    visited: int = 0


def foreground_color(node: Node) -> Optional[Color]:
    """First visible solid fill of ``node``, or None when it has none."""
    paint = node.first_visible_solid()
    return paint.color if paint is not None else None


def collect(
    selection: Iterable[Node],
    page: Node,
    settings: Optional[AuditSettings] = None
) -> CollectionResult:
    """
    Walk the selected subtrees and collect text and shape candidates.

    Args:
        selection: Root nodes to scan, in selection order
        page: Document root used for background resolution
        settings: Limits and page background (defaults apply when omitted)

    Returns:
        CollectionResult with the candidates in walk order, the truncation
        flag and the number of nodes visited.
    """
    settings = settings or AuditSettings()
    context = TraversalContext.from_settings(settings)
    items: List[ContrastCandidate] = []
    start_time = time.time()

    for root in selection:
        if not _walk(root, page, settings, context, items):
            break

    result = CollectionResult(items=items, truncated=context.truncated, visited=context.visited)

    logger.info(
        f"Collected {len(items)} contrast candidates from {context.visited} nodes "
        f"(truncated: {result.truncated}, {(time.time() - start_time) * 1000:.1f}ms)"
    )
    return result


def _walk(
    root: Node,
    page: Node,
    settings: AuditSettings,
    context: TraversalContext,
    items: List[ContrastCandidate]
) -> bool:
    # Returns False once a limit aborted the walk
    stack = [root]
    while stack:
        node = stack.pop()

        if not context.enter(node):
            return False
        if not node.visible:
            continue

        role = node.role
        if role in (NodeRole.TEXT, NodeRole.SHAPE):
            candidate = _make_candidate(node, page, settings)
            if candidate is not None:
                items.append(candidate)
                context.collected += 1
            if role == NodeRole.TEXT:
                continue

        # Shapes such as boolean operations may have children of their own
        stack.extend(reversed(node.children))

    return True


def _make_candidate(node: Node, page: Node, settings: AuditSettings) -> Optional[ContrastCandidate]:
    fg = foreground_color(node)
    if fg is None:
        return None

    bg = resolve_background(node, page, settings)
    is_text, is_large, requirement = classify_node(node)
    return ContrastCandidate(
        node=node,
        fg=fg,
        bg=bg,
        is_text=is_text,
        is_large=is_large,
        requirement=requirement,
    )
