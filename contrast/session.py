# contrast/session.py
"""
Message contract between the audit engine and the presentation layer.

The UI sends ``scan``, ``apply-fix`` and ``cancel`` messages; the engine
answers with ``scan-result`` and ``fix-applied`` messages and short operator
notifications. Failures never escape ``handle_message``: they are logged and
turned into notifications.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Optional, Set

from errors import (
    FixApplicationError,
    create_error_context,
    log_error_with_context,
)
from runtime.settings import AuditSettings

from .color import rgb_to_hex
from .core import ContrastIssue
from .document import DocumentProvider
from .fixes import FixSummary, apply_fix
from .grouping import IssueReport, build_issues_and_passed
from .traversal import collect


logger = logging.getLogger(__name__)


MSG_SCAN = "scan"
MSG_SCAN_RESULT = "scan-result"
MSG_APPLY_FIX = "apply-fix"
MSG_FIX_APPLIED = "fix-applied"
MSG_CANCEL = "cancel"

EMPTY_SELECTION_NOTICE = "Select one or more layers to scan."
STALE_ISSUE_NOTICE = "This issue is out of date. Run a new scan."
FIX_APPLIED_NOTICE = "Applied color fix."


@dataclass
class ScanResult:
    report: IssueReport = field(default_factory=IssueReport)
    scanned: int = 0
    truncated: bool = False

    def to_message(self) -> Dict[str, Any]:
        issues = [issue.to_dict() for issue in self.report.issues]
        passed = [issue.to_dict() for issue in self.report.passed]
        return {
            "type": MSG_SCAN_RESULT,
            "issues": issues,
            "passed": passed,
            "all": issues + passed,
            "truncated": self.truncated,
        }

    def summary(self) -> str:
        limit = " (limit)" if self.truncated else ""
        if not self.report.issues:
            return f"Scanned {self.scanned} layers. No contrast issues.{limit}"
        return f"Scanned {self.scanned} layers. Found {len(self.report.issues)} contrast issue(s).{limit}"


class AuditSession:
    """
    One audit conversation with a presentation layer.

    Args:
        document: Host document provider
        post_message: Sends a message dict to the UI
        notify: Shows a short notification to the operator
        close: Called when the UI cancels the session
        settings: Audit limits; the host's page background, when it supplies
            one, overrides ``settings.page_background``
    """

    def __init__(
        self,
        document: DocumentProvider,
        post_message: Callable[[Dict[str, Any]], None],
        notify: Optional[Callable[[str], None]] = None,
        close: Optional[Callable[[], None]] = None,
        settings: Optional[AuditSettings] = None
    ):
        self.document = document
        self.post_message = post_message
        self.notify = notify or (lambda text: logger.info(f"Notification: {text}"))
        self.close = close or (lambda: None)
        self.settings = settings or AuditSettings()
        self.closed = False
        self._current_groups: Dict[str, Set[str]] = {}

    def effective_settings(self) -> AuditSettings:
        host_background = self.document.page_background
        if host_background is None:
            return self.settings
        return replace(self.settings, page_background=rgb_to_hex(host_background))

    def scan(self) -> ScanResult:
        """Scan the current selection and remember its issue keys."""
        selection = self.document.get_selection()
        if not selection:
            self._current_groups = {}
            return ScanResult()

        collection = collect(selection, self.document.page, self.effective_settings())
        report = build_issues_and_passed(collection.items)
        self._current_groups = {}
        for record in report.all:
            self._current_groups.setdefault(record.key, set()).update(record.node_ids)

        return ScanResult(report=report, scanned=len(collection.items), truncated=collection.truncated)

    def is_current(self, issue: ContrastIssue) -> bool:
        # Every node the issue names must still belong to the same group
        group = self._current_groups.get(issue.key)
        return group is not None and set(issue.node_ids) <= group

    async def handle_message(self, message: Dict[str, Any]) -> None:
        if self.closed:
            logger.debug(f"Ignoring message on closed session: {message.get('type')!r}")
            return

        message_type = message.get("type") if isinstance(message, dict) else None

        if message_type == MSG_SCAN:
            self._handle_scan()
        elif message_type == MSG_APPLY_FIX:
            await self._handle_apply_fix(message)
        elif message_type == MSG_CANCEL:
            self.closed = True
            self._current_groups = {}
            self.close()
        else:
            logger.warning(f"Ignoring unknown message type: {message_type!r}")

    def _handle_scan(self) -> None:
        if not self.document.get_selection():
            self._current_groups = {}
            self.notify(EMPTY_SELECTION_NOTICE)
            self.post_message(ScanResult().to_message())
            return

        try:
            result = self.scan()
        except Exception as e:
            context = create_error_context(component="Audit Session", operation="scan")
            log_error_with_context(e, context)
            self._current_groups = {}
            self.notify(f"Error scanning layers: {e}")
            self.post_message(ScanResult().to_message())
            return

        self.notify(result.summary())
        self.post_message(result.to_message())

    async def _handle_apply_fix(self, message: Dict[str, Any]) -> Optional[FixSummary]:
        payload = message.get("issue")
        new_fg_hex = message.get("newFgHex")
        new_bg_hex = message.get("newBgHex")

        if not payload or not (new_fg_hex or new_bg_hex):
            logger.debug("Ignoring apply-fix without an issue or replacement colors")
            return None

        try:
            issue = ContrastIssue.from_dict(payload)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            context = create_error_context(component="Audit Session", operation="parse_issue")
            log_error_with_context(e, context, level="warning")
            self.notify(f"Error applying fix: invalid issue payload ({e})")
            return None

        if not self.is_current(issue):
            self.notify(STALE_ISSUE_NOTICE)
            return None

        try:
            summary = await apply_fix(issue, new_fg_hex, new_bg_hex, self.document, self.effective_settings())
        except FixApplicationError as e:
            self.notify(f"Error applying fix: {e.message}")
            return None

        self.notify(FIX_APPLIED_NOTICE)
        self.post_message({"type": MSG_FIX_APPLIED})
        return summary
