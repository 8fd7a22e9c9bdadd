# contrast/document.py
"""
Document provider boundary.

The engine reads the scene graph through ``DocumentProvider`` and writes only
fill lists back through it. ``InMemoryDocument`` is the concrete provider
used for snapshots exported by a host as JSON-style dictionaries, and in tests.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Any, Optional, List, Iterable

from errors import ConfigurationError, create_error_context

from .color import hex_to_rgb
from .core import (
    BoundingBox,
    Color,
    Node,
    NodeKind,
    Paint,
    PaintType,
)


logger = logging.getLogger(__name__)


class DocumentProvider(ABC):
    """
    Read access to the host scene graph plus the single write the fix path needs.

    Node lookups may suspend while the host resolves an identifier; they
    return None for nodes that no longer exist.
    """

    @property
    @abstractmethod
    def page(self) -> Node:
        """The current page (document root)."""

    @property
    def page_background(self) -> Optional[Color]:
        """Host-supplied page background, if the host has one."""
        return None

    @abstractmethod
    def get_selection(self) -> List[Node]:
        """Currently selected root nodes, in selection order."""

    @abstractmethod
    async def get_node_by_id(self, node_id: str) -> Optional[Node]:
        """Resolve a stable node identifier to a live node."""

    @abstractmethod
    def set_fills(self, node: Node, fills: List[Paint]) -> None:
        """Replace a node's fill-paint list."""


class InMemoryDocument(DocumentProvider):
    """Scene graph held in memory, indexed by node id."""

    def __init__(
        self,
        page: Node,
        selection: Optional[Iterable[Node]] = None,
        page_background: Optional[Color] = None
    ):
        if page.kind != NodeKind.PAGE:
            raise ConfigurationError(
                message=f"Document root must be a PAGE node, got {page.kind.value}",
                expected_format="PAGE",
            )
        self._page = page
        self._page_background = page_background
        self._index: Dict[str, Node] = {}
        self._selection: List[Node] = list(selection or [])
        self.reindex()

    @property
    def page(self) -> Node:
        return self._page

    @property
    def page_background(self) -> Optional[Color]:
        return self._page_background

    def reindex(self) -> None:
        """Rebuild the id index; duplicate ids are rejected."""
        index: Dict[str, Node] = {}
        for node in self._page.iter_subtree():
            if node.id in index:
                raise ConfigurationError(
                    message=f"Duplicate node id in document: '{node.id}'",
                    expected_format="Unique node identifiers",
                    error_context=create_error_context(
                        component="Document",
                        operation="reindex",
                        node_id=node.id
                    )
                )
            index[node.id] = node
        self._index = index

    def get_selection(self) -> List[Node]:
        return list(self._selection)

    def set_selection(self, nodes: Iterable[Node]) -> None:
        self._selection = list(nodes)

    async def get_node_by_id(self, node_id: str) -> Optional[Node]:
        return self._index.get(node_id)

    def find(self, node_id: str) -> Optional[Node]:
        """Synchronous lookup."""
        return self._index.get(node_id)

    def set_fills(self, node: Node, fills: List[Paint]) -> None:
        node.fills = list(fills)

    def remove_node(self, node_id: str) -> Optional[Node]:
        """Detach a node and its subtree from the document."""
        node = self._index.get(node_id)
        if node is None:
            return None
        if node.parent is not None:
            node.parent.children.remove(node)
            node.parent = None
        for removed in node.iter_subtree():
            self._index.pop(removed.id, None)
        self._selection = [n for n in self._selection if n.id in self._index]
        return node

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InMemoryDocument":
        """
        Build a document from a host snapshot.

        Expected shape::

            {
                "page": {"id": "0:1", "type": "PAGE", "children": [...]},
                "selection": ["1:2", "1:5"],
                "background": "#F5F5F5"
            }

        Selection ids that do not resolve are dropped. Nodes with an unknown
        ``type`` are skipped together with their subtree.
        """
        page_data = data.get("page")
        if not isinstance(page_data, dict):
            raise ConfigurationError(
                message="Document snapshot has no 'page' object",
                expected_format="{'page': {...}, 'selection': [...]}",
            )

        page = node_from_dict(page_data)
        if page is None:
            raise ConfigurationError(
                message=f"Unsupported page node type: {page_data.get('type')!r}",
                expected_format="PAGE",
            )

        background = None
        if data.get("background") is not None:
            background = hex_to_rgb(data["background"])
            if background is None:
                logger.warning(f"Ignoring unparseable page background {data['background']!r}")

        document = cls(page, page_background=background)

        selection = []
        for node_id in data.get("selection", []):
            node = document.find(node_id)
            if node is None:
                logger.warning(f"Selected node {node_id} not found in snapshot")
                continue
            selection.append(node)
        document.set_selection(selection)

        return document


def node_from_dict(data: Dict[str, Any], parent: Optional[Node] = None) -> Optional[Node]:
    """
    Convert one host node dictionary and its whole subtree into Nodes.

    Built with an explicit stack so arbitrarily deep snapshots load. A node
    with an unsupported type is skipped together with its children; if that
    node is ``data`` itself, None is returned.
    """
    root = None
    stack = [(data, parent)]
    while stack:
        node_data, node_parent = stack.pop()
        node = _node_fields_from_dict(node_data)
        if node is None:
            continue
        if node_parent is not None:
            node_parent.append_child(node)
        if root is None:
            root = node
        # Reversed so children are appended in document order
        for child_data in reversed(node_data.get("children") or []):
            stack.append((child_data, node))

    return root


def _node_fields_from_dict(data: Dict[str, Any]) -> Optional[Node]:
    try:
        kind = NodeKind(data.get("type"))
    except ValueError:
        logger.warning(f"Skipping node {data.get('id')!r} with unsupported type {data.get('type')!r}")
        return None

    font_name = data.get("fontName")
    return Node(
        id=str(data["id"]),
        kind=kind,
        visible=data.get("visible", True) is not False,
        fills=_paints_from_value(data.get("fills")),
        bounds=_bounds_from_value(data.get("absoluteBoundingBox")),
        font_size=_font_size_from_value(data.get("fontSize")),
        font_style=font_name.get("style") if isinstance(font_name, dict) else None,
        name=data.get("name", ""),
    )


def _paints_from_value(value: Any) -> Optional[List[Paint]]:
    # Anything other than a list ("mixed", absent) means no usable fills
    if not isinstance(value, list):
        return None

    paints = []
    for item in value:
        try:
            paint_type = PaintType(item.get("type"))
        except (AttributeError, ValueError):
            logger.debug(f"Ignoring unsupported paint {item!r}")
            continue

        color = None
        raw_color = item.get("color")
        if isinstance(raw_color, dict):
            try:
                color = Color(float(raw_color["r"]), float(raw_color["g"]), float(raw_color["b"]))
            except (KeyError, TypeError, ValueError):
                color = None

        paints.append(Paint(type=paint_type, visible=item.get("visible", True) is not False, color=color))
    return paints


def _bounds_from_value(value: Any) -> Optional[BoundingBox]:
    if not isinstance(value, dict):
        return None
    try:
        return BoundingBox(
            x=float(value["x"]),
            y=float(value["y"]),
            width=float(value["width"]),
            height=float(value["height"]),
        )
    except (KeyError, TypeError, ValueError):
        return None


def _font_size_from_value(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)
