import logging
import os
import platform
import sys
from importlib.metadata import version, PackageNotFoundError
from typing import Dict, List, Optional

import allure
import pytest
from dotenv import load_dotenv

from contrast import (
    AuditSession,
    BoundingBox,
    Color,
    InMemoryDocument,
    Node,
    NodeKind,
    Paint,
    PaintType,
    hex_to_rgb,
    solid_paint,
)
from errors import configure_error_logging
from runtime import AuditSettings

# Load environment variables from .env file
load_dotenv()

# Structured JSON logging for engine and error loggers
configure_error_logging(level=os.getenv("CONTRAST_LOG_LEVEL", "INFO"), format_type="json")


def _package_version(name: str) -> str:
    try:
        return version(name)
    except PackageNotFoundError:
        return "unknown"


@pytest.fixture(scope="session", autouse=True)
def environment_reporter(request: pytest.FixtureRequest):
    # Write environment details for the Allure report when --alluredir is given
    allure_dir = request.config.getoption("--alluredir", default=None)
    if not allure_dir or not isinstance(allure_dir, str):
        return

    properties_file = os.path.join(allure_dir, "environment.properties")

    try:
        os.makedirs(allure_dir, exist_ok=True)
    except PermissionError:
        logging.error(f"Permission denied to create report directory: {allure_dir}")
        return

    defaults = AuditSettings()
    env_props = {
        "operating_system": f"{platform.system()} {platform.release()}",
        "python_version": sys.version.split(" ")[0],
        "tenacity_version": _package_version("tenacity"),
        "max_visits": defaults.max_visits,
        "max_candidates": defaults.max_candidates,
        "page_background": defaults.page_background,
    }

    try:
        with open(properties_file, "w") as f:
            for key, value in env_props.items():
                f.write(f"{key}={value}\n")
    except IOError as e:
        logging.error(f"Failed to write environment properties file: {e}")


@pytest.fixture
def settings() -> AuditSettings:
    # Default limits with a near-zero lookup backoff so retry tests stay fast
    return AuditSettings(lookup_base_wait_seconds=0.001)


# --- Base Test Class for scene-graph tests ---


class BaseContrastTest:
    # Base class with scene-building helpers to reduce boilerplate

    def setup_method(self):
        self._next_id = 0

    def teardown_method(self):
        self._next_id = 0

    def _new_id(self, prefix: str) -> str:
        self._next_id += 1
        return f"{prefix}:{self._next_id}"

    def color(self, hex_value: str) -> Color:
        parsed = hex_to_rgb(hex_value)
        assert parsed is not None, f"bad test color {hex_value}"
        return parsed

    def fills(self, *hex_values: str) -> List[Paint]:
        return [solid_paint(self.color(value)) for value in hex_values]

    def page(self) -> Node:
        return Node(id="0:1", kind=NodeKind.PAGE, name="Page 1")

    def frame(
        self,
        parent: Node,
        fill: Optional[str] = None,
        bounds: Optional[BoundingBox] = BoundingBox(0, 0, 400, 400),
        kind: NodeKind = NodeKind.FRAME,
        visible: bool = True,
        node_id: Optional[str] = None
    ) -> Node:
        node = Node(
            id=node_id or self._new_id("frame"),
            kind=kind,
            visible=visible,
            fills=self.fills(fill) if fill else [],
            bounds=bounds,
        )
        return parent.append_child(node)

    def text(
        self,
        parent: Node,
        fill: Optional[str] = "#000000",
        font_size: Optional[float] = 16,
        font_style: Optional[str] = "Regular",
        bounds: Optional[BoundingBox] = BoundingBox(10, 10, 100, 20),
        visible: bool = True,
        node_id: Optional[str] = None
    ) -> Node:
        node = Node(
            id=node_id or self._new_id("text"),
            kind=NodeKind.TEXT,
            visible=visible,
            fills=self.fills(fill) if fill else [],
            bounds=bounds,
            font_size=font_size,
            font_style=font_style,
        )
        return parent.append_child(node)

    def shape(
        self,
        parent: Node,
        fill: Optional[str] = "#000000",
        kind: NodeKind = NodeKind.VECTOR,
        bounds: Optional[BoundingBox] = BoundingBox(10, 10, 24, 24),
        visible: bool = True,
        node_id: Optional[str] = None
    ) -> Node:
        node = Node(
            id=node_id or self._new_id("shape"),
            kind=kind,
            visible=visible,
            fills=self.fills(fill) if fill else [],
            bounds=bounds,
        )
        return parent.append_child(node)

    def document(self, page: Node, *selection: Node) -> InMemoryDocument:
        return InMemoryDocument(page, selection=selection or page.children)

    def session(self, document: InMemoryDocument, settings: Optional[AuditSettings] = None):
        # Session wired to in-memory recorders for posted messages and notifications
        posted: List[Dict] = []
        notices: List[str] = []
        closed: List[bool] = []
        session = AuditSession(
            document,
            post_message=posted.append,
            notify=notices.append,
            close=lambda: closed.append(True),
            settings=settings,
        )
        return session, posted, notices, closed

    def attach_issue(self, name: str, payload) -> None:
        allure.attach(str(payload), name=name, attachment_type=allure.attachment_type.TEXT)


def gradient_paint() -> Paint:
    return Paint(type=PaintType.GRADIENT_LINEAR)
