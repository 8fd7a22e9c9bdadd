# contrast/categories.py
"""
WCAG 2.1 contrast categories.

Requirements per category:
- Normal text: AA 4.5:1, AAA 7:1
- Large text (18+ any weight, or 14+ bold): AA 3:1, AAA 4.5:1
- UI components and graphical objects: AA 3:1, no AAA tier
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .core import Node, NodeRole


class ElementType(Enum):
    NORMAL_TEXT = "normal-text"
    LARGE_TEXT = "large-text"
    UI_COMPONENT = "ui-component"


@dataclass(frozen=True)
class ContrastRequirement:
    required_aa: float
    required_aaa: Optional[float]
    category: ElementType


LARGE_TEXT_SIZE = 18.0
LARGE_BOLD_TEXT_SIZE = 14.0
BOLD_STYLE_MARKERS: Tuple[str, ...] = ("bold", "black", "heavy", "extrabold")

UI_COMPONENT_REQUIREMENT = ContrastRequirement(3.0, None, ElementType.UI_COMPONENT)
LARGE_TEXT_REQUIREMENT = ContrastRequirement(3.0, 4.5, ElementType.LARGE_TEXT)
NORMAL_TEXT_REQUIREMENT = ContrastRequirement(4.5, 7.0, ElementType.NORMAL_TEXT)


def get_contrast_requirements(is_text: bool, is_large: bool) -> ContrastRequirement:
    if not is_text:
        return UI_COMPONENT_REQUIREMENT
    if is_large:
        return LARGE_TEXT_REQUIREMENT
    return NORMAL_TEXT_REQUIREMENT


def is_large_text(font_size: Optional[float], font_style: Optional[str]) -> bool:
    """
    Decide whether text qualifies for the relaxed large-text thresholds.

    Args:
        font_size: Size in the same unit as the 18/14 thresholds; None when mixed
        font_style: Font style name such as "Bold Italic"; None when mixed

    Returns:
        True for 18+ at any weight or 14+ with a bold-like style. Mixed values
        fall back to normal text, which has the stricter thresholds.
    """
    if font_size is None or isinstance(font_size, bool) or not isinstance(font_size, (int, float)):
        return False
    if font_size >= LARGE_TEXT_SIZE:
        return True
    if font_size >= LARGE_BOLD_TEXT_SIZE:
        style = font_style.lower() if isinstance(font_style, str) else ""
        return any(marker in style for marker in BOLD_STYLE_MARKERS)
    return False


def classify_node(node: Node) -> Tuple[bool, bool, ContrastRequirement]:
    """Return ``(is_text, is_large, requirement)`` for an audit candidate."""
    is_text = node.role == NodeRole.TEXT
    is_large = is_text and is_large_text(node.font_size, node.font_style)
    return is_text, is_large, get_contrast_requirements(is_text, is_large)
