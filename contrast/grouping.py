# contrast/grouping.py
"""
Pass/fail classification and deduplication of contrast candidates.

Candidates sharing the quantized signature ``fg|bg|isText|isLargeText`` are
merged into a single ContrastIssue. The first candidate seen for a key fixes
every field of the record; later ones only contribute their node id.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from .color import contrast_ratio, relative_luminance, rgb_to_hex
from .core import ContrastIssue, grouping_key
from .traversal import ContrastCandidate


@dataclass
class IssueReport:
    issues: List[ContrastIssue] = field(default_factory=list)
    passed: List[ContrastIssue] = field(default_factory=list)

    @property
    def all(self) -> List[ContrastIssue]:
        return self.issues + self.passed

    def keys(self) -> List[str]:
        return [issue.key for issue in self.all]


def evaluate_candidate(candidate: ContrastCandidate) -> ContrastIssue:
    """Build a single-member record for one candidate."""
    ratio = contrast_ratio(relative_luminance(candidate.fg), relative_luminance(candidate.bg))
    requirement = candidate.requirement
    pass_aaa = None if requirement.required_aaa is None else ratio >= requirement.required_aaa

    return ContrastIssue(
        foreground_hex=rgb_to_hex(candidate.fg),
        background_hex=rgb_to_hex(candidate.bg),
        ratio=ratio,
        required_aa=requirement.required_aa,
        required_aaa=requirement.required_aaa,
        pass_aa=ratio >= requirement.required_aa,
        pass_aaa=pass_aaa,
        element_type=requirement.category.value,
        is_text=candidate.is_text,
        is_large_text=candidate.is_large,
    )


def build_issues_and_passed(items: Iterable[ContrastCandidate]) -> IssueReport:
    """
    Group candidates into failing issues and passing records.

    Args:
        items: Candidates in collection order

    Returns:
        IssueReport whose lists keep first-seen key order and whose node ids
        keep encounter order.
    """
    issues: Dict[str, ContrastIssue] = {}
    passed: Dict[str, ContrastIssue] = {}

    for candidate in items:
        entry = evaluate_candidate(candidate)
        key = grouping_key(entry.foreground_hex, entry.background_hex, entry.is_text, entry.is_large_text)
        bucket = passed if entry.pass_aa else issues

        if key not in bucket:
            bucket[key] = entry
        bucket[key].node_ids.append(candidate.node_id)

    return IssueReport(issues=list(issues.values()), passed=list(passed.values()))
