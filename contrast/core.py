# contrast/core.py
"""
Core data model for the contrast audit engine.

This module defines the scene-graph types the engine reads (colors, paints,
bounding boxes and nodes) and the aggregate records it produces. Nodes are a
closed set of kinds; every kind maps to exactly one role so that traversal
code can dispatch on the role instead of inspecting node attributes.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, Optional, List


@dataclass(frozen=True)
class Color:
    """An sRGB color with channels in the 0..1 range. No alpha."""
    r: float
    g: float
    b: float

    def to_dict(self) -> Dict[str, float]:
        return {"r": self.r, "g": self.g, "b": self.b}


class PaintType(Enum):
    """Paint types a host can attach to a node's fill list."""
    SOLID = "SOLID"
    GRADIENT_LINEAR = "GRADIENT_LINEAR"
    GRADIENT_RADIAL = "GRADIENT_RADIAL"
    GRADIENT_ANGULAR = "GRADIENT_ANGULAR"
    GRADIENT_DIAMOND = "GRADIENT_DIAMOND"
    IMAGE = "IMAGE"
    VIDEO = "VIDEO"


@dataclass(frozen=True)
class Paint:
    """
    A single fill paint.

    Attributes:
        type: Paint type; only SOLID paints carry a meaningful color
        visible: Hidden paints are ignored by every lookup
        color: Paint color for SOLID paints
    """
    type: PaintType
    visible: bool = True
    color: Optional[Color] = None

    @property
    def is_visible_solid(self) -> bool:
        return self.visible and self.type == PaintType.SOLID and self.color is not None


def solid_paint(color: Color, visible: bool = True) -> Paint:
    """Shorthand for a SOLID paint."""
    return Paint(type=PaintType.SOLID, visible=visible, color=color)


@dataclass(frozen=True)
class BoundingBox:
    """Absolute position and size of a laid-out node in document space."""
    x: float
    y: float
    width: float
    height: float

    def overlaps(self, other: "BoundingBox") -> bool:
        """
        Strict axis-aligned intersection test.

        Rectangles that only share an edge or a corner do not overlap.
        """
        return (
            self.x < other.x + other.width and
            other.x < self.x + self.width and
            self.y < other.y + other.height and
            other.y < self.y + self.height
        )


class NodeRole(Enum):
    """What the audit does with a node."""
    TEXT = "text"
    SHAPE = "shape"
    CONTAINER = "container"


class NodeKind(Enum):
    """Closed set of scene-graph node kinds."""
    TEXT = "TEXT"
    VECTOR = "VECTOR"
    BOOLEAN_OPERATION = "BOOLEAN_OPERATION"
    STAR = "STAR"
    LINE = "LINE"
    ELLIPSE = "ELLIPSE"
    POLYGON = "POLYGON"
    RECTANGLE = "RECTANGLE"
    FRAME = "FRAME"
    GROUP = "GROUP"
    COMPONENT = "COMPONENT"
    COMPONENT_SET = "COMPONENT_SET"
    INSTANCE = "INSTANCE"
    SECTION = "SECTION"
    PAGE = "PAGE"

    @property
    def role(self) -> NodeRole:
        return NODE_KIND_ROLES[self]


NODE_KIND_ROLES: Dict[NodeKind, NodeRole] = {
    NodeKind.TEXT: NodeRole.TEXT,
    NodeKind.VECTOR: NodeRole.SHAPE,
    NodeKind.BOOLEAN_OPERATION: NodeRole.SHAPE,
    NodeKind.STAR: NodeRole.SHAPE,
    NodeKind.LINE: NodeRole.SHAPE,
    NodeKind.ELLIPSE: NodeRole.SHAPE,
    NodeKind.POLYGON: NodeRole.SHAPE,
    NodeKind.RECTANGLE: NodeRole.SHAPE,
    NodeKind.FRAME: NodeRole.CONTAINER,
    NodeKind.GROUP: NodeRole.CONTAINER,
    NodeKind.COMPONENT: NodeRole.CONTAINER,
    NodeKind.COMPONENT_SET: NodeRole.CONTAINER,
    NodeKind.INSTANCE: NodeRole.CONTAINER,
    NodeKind.SECTION: NodeRole.CONTAINER,
    NodeKind.PAGE: NodeRole.CONTAINER,
}


@dataclass(eq=False)
class Node:
    """
    A node in the host's scene graph.

    Children are kept in z-order: later entries render on top of earlier ones.
    ``fills`` is None when the node has no fill property or the host reports
    mixed fills. ``font_size`` is None for text whose size is mixed across runs.
    Nodes compare by identity.
    """
    id: str
    kind: NodeKind
    visible: bool = True
    fills: Optional[List[Paint]] = None
    bounds: Optional[BoundingBox] = None
    font_size: Optional[float] = None
    font_style: Optional[str] = None
    name: str = ""
    parent: Optional["Node"] = field(default=None, repr=False)
    children: List["Node"] = field(default_factory=list, repr=False)

    @property
    def role(self) -> NodeRole:
        return self.kind.role

    def append_child(self, child: "Node") -> "Node":
        """Attach ``child`` on top of the existing children and return it."""
        child.parent = self
        self.children.append(child)
        return child

    def first_visible_solid(self) -> Optional[Paint]:
        """First visible SOLID paint in paint-list order."""
        if not self.fills:
            return None
        for paint in self.fills:
            if paint.is_visible_solid:
                return paint
        return None

    def has_visible_solid_fill(self) -> bool:
        return self.first_visible_solid() is not None

    def iter_subtree(self):
        """Yield this node and all its descendants, depth first, each node once."""
        seen = set()
        stack = [self]
        while stack:
            node = stack.pop()
            if id(node) in seen:
                continue
            seen.add(id(node))
            yield node
            stack.extend(reversed(node.children))


@dataclass
class ContrastIssue:
    """
    Aggregated contrast record for one (foreground, background, category) signature.

    Built fresh on every scan. Grouping only ever appends to ``node_ids``.
    """
    foreground_hex: str
    background_hex: str
    ratio: float
    required_aa: float
    required_aaa: Optional[float]
    pass_aa: bool
    pass_aaa: Optional[bool]
    element_type: str
    is_text: bool
    is_large_text: bool
    node_ids: List[str] = field(default_factory=list)

    @property
    def key(self) -> str:
        return grouping_key(self.foreground_hex, self.background_hex, self.is_text, self.is_large_text)

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation used by the presentation layer."""
        return {
            "foregroundHex": self.foreground_hex,
            "backgroundHex": self.background_hex,
            "ratio": self.ratio,
            "requiredAA": self.required_aa,
            "requiredAAA": self.required_aaa,
            "passAA": self.pass_aa,
            "passAAA": self.pass_aaa,
            "nodeIds": list(self.node_ids),
            "isText": self.is_text,
            "isLargeText": self.is_large_text,
            "elementType": self.element_type,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContrastIssue":
        """
        Rebuild an issue from its wire representation.

        Raises:
            KeyError: If a required field is missing
        """
        return cls(
            foreground_hex=data["foregroundHex"],
            background_hex=data["backgroundHex"],
            ratio=float(data["ratio"]),
            required_aa=float(data["requiredAA"]),
            required_aaa=data.get("requiredAAA"),
            pass_aa=bool(data["passAA"]),
            pass_aaa=data.get("passAAA"),
            element_type=data["elementType"],
            is_text=bool(data["isText"]),
            is_large_text=bool(data["isLargeText"]),
            node_ids=list(data.get("nodeIds", [])),
        )


def grouping_key(foreground_hex: str, background_hex: str, is_text: bool, is_large_text: bool) -> str:
    """``fg|bg|isText|isLargeText`` with booleans spelled true/false."""
    return f"{foreground_hex}|{background_hex}|{_flag(is_text)}|{_flag(is_large_text)}"


def _flag(value: bool) -> str:
    return "true" if value else "false"
