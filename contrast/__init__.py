# contrast/__init__.py
"""
Contrast Harmony audit engine.

Audits text and icon layers of a scene graph for WCAG 2.1 contrast, resolving
each element's effective background by ancestor and sibling search, grouping
results by color-pair signature, and applying bulk color fixes.

Usage:
    from contrast import InMemoryDocument, AuditSession

    document = InMemoryDocument.from_dict(snapshot)
    session = AuditSession(document, post_message=ui.post, notify=ui.toast)
    await session.handle_message({"type": "scan"})
"""

from .core import (
    Color,
    Paint,
    PaintType,
    BoundingBox,
    Node,
    NodeKind,
    NodeRole,
    NODE_KIND_ROLES,
    ContrastIssue,
    grouping_key,
    solid_paint,
)

from .color import (
    linearize,
    relative_luminance,
    contrast_ratio,
    contrast_ratio_for,
    rgb_to_hex,
    hex_to_rgb,
    WHITE,
    BLACK,
)
from .categories import (
    ElementType,
    ContrastRequirement,
    get_contrast_requirements,
    is_large_text,
    classify_node,
)
from .background import resolve_background, resolve_background_source
from .traversal import ContrastCandidate, TraversalContext, CollectionResult, collect
from .grouping import IssueReport, build_issues_and_passed
from .document import DocumentProvider, InMemoryDocument, node_from_dict
from .fixes import FixSummary, apply_fix
from .session import AuditSession, ScanResult

__all__ = [
    # Data model
    "Color",
    "Paint",
    "PaintType",
    "BoundingBox",
    "Node",
    "NodeKind",
    "NodeRole",
    "NODE_KIND_ROLES",
    "ContrastIssue",
    "grouping_key",
    "solid_paint",

    # Color math
    "linearize",
    "relative_luminance",
    "contrast_ratio",
    "contrast_ratio_for",
    "rgb_to_hex",
    "hex_to_rgb",
    "WHITE",
    "BLACK",

    # Classification and resolution
    "ElementType",
    "ContrastRequirement",
    "get_contrast_requirements",
    "is_large_text",
    "classify_node",
    "resolve_background",
    "resolve_background_source",

    # Scan pipeline
    "ContrastCandidate",
    "TraversalContext",
    "CollectionResult",
    "collect",
    "IssueReport",
    "build_issues_and_passed",

    # Host boundary
    "DocumentProvider",
    "InMemoryDocument",
    "node_from_dict",
    "FixSummary",
    "apply_fix",
    "AuditSession",
    "ScanResult",
]
