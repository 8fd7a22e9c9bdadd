import allure
import pytest

from conftest import BaseContrastTest, gradient_paint
from contrast import (
    ElementType,
    NodeKind,
    TraversalContext,
    collect,
    rgb_to_hex,
)
from runtime import AuditSettings


@allure.feature("Scene Traversal")
class TestCandidateCollection(BaseContrastTest):
    # Which nodes become contrast candidates

    @allure.story("Collection")
    @allure.title("Text and shapes are collected with their resolved colors")
    def test_text_and_shapes_collected(self):
        page = self.page()
        card = self.frame(page, fill="#FFFFFF")
        title = self.text(card, fill="#000000")
        icon = self.shape(card, fill="#777777", kind=NodeKind.VECTOR)
        divider = self.shape(card, fill="#CCCCCC", kind=NodeKind.LINE)

        result = collect([card], page)

        assert [c.node for c in result.items] == [title, icon, divider]
        assert [c.is_text for c in result.items] == [True, False, False]
        assert all(rgb_to_hex(c.bg) == "#FFFFFF" for c in result.items)
        assert rgb_to_hex(result.items[1].fg) == "#777777"
        assert result.truncated is False
        assert result.visited == 4

    @allure.story("Collection")
    @allure.title("Containers are walked but never collected, even when filled")
    def test_containers_not_candidates(self):
        page = self.page()
        outer = self.frame(page, fill="#FFFFFF")
        inner = self.frame(outer, fill="#000000", kind=NodeKind.COMPONENT)
        instance = self.frame(inner, fill="#EEEEEE", kind=NodeKind.INSTANCE)
        label = self.text(instance)

        result = collect([outer], page)

        assert [c.node for c in result.items] == [label]

    @allure.story("Collection")
    @allure.title("Nodes without a visible solid fill are not candidates")
    def test_nodes_without_solid_fill_skipped(self):
        page = self.page()
        card = self.frame(page, fill="#FFFFFF")
        self.text(card, fill=None)
        gradient_text = self.text(card)
        gradient_text.fills = [gradient_paint()]
        mixed = self.shape(card)
        mixed.fills = None

        assert collect([card], page).items == []

    @allure.story("Collection")
    @allure.title("Hidden nodes are skipped together with their subtrees")
    def test_hidden_subtree_skipped(self):
        page = self.page()
        hidden = self.frame(page, fill="#FFFFFF", visible=False)
        for _ in range(3):
            self.text(hidden)
        visible = self.frame(page, fill="#FFFFFF")
        shown = self.text(visible)
        self.text(visible, visible=False)

        result = collect([hidden, visible], page)

        assert [c.node for c in result.items] == [shown]
        # hidden frame, visible frame, two texts under it
        assert result.visited == 4

    @allure.story("Collection")
    @allure.title("Boolean operations are candidates and their children are walked")
    def test_boolean_operation_children(self):
        page = self.page()
        card = self.frame(page, fill="#FFFFFF")
        union = self.shape(card, kind=NodeKind.BOOLEAN_OPERATION)
        part_a = self.shape(union, kind=NodeKind.ELLIPSE)
        part_b = self.shape(union, kind=NodeKind.RECTANGLE)

        result = collect([card], page)

        assert [c.node for c in result.items] == [union, part_a, part_b]

    @allure.story("Collection")
    @allure.title("Walk order is depth first in z-order across selection roots")
    def test_walk_order(self):
        page = self.page()
        first = self.frame(page, fill="#FFFFFF")
        a = self.text(first, node_id="a")
        nested = self.frame(first, kind=NodeKind.GROUP)
        b = self.text(nested, node_id="b")
        c = self.text(first, node_id="c")
        second = self.frame(page, fill="#000000")
        d = self.text(second, fill="#FFFFFF", node_id="d")

        result = collect([first, second], page)

        assert [item.node_id for item in result.items] == ["a", "b", "c", "d"]
        assert [item.node for item in result.items] == [a, b, c, d]

    @allure.story("Collection")
    @allure.title("A selected text node is collected directly")
    def test_text_root(self):
        page = self.page()
        card = self.frame(page, fill="#000000")
        label = self.text(card, fill="#FFFFFF")

        result = collect([label], page)

        assert len(result.items) == 1
        assert rgb_to_hex(result.items[0].bg) == "#000000"

    @allure.story("Collection")
    @allure.title("Mixed font size text is classified as normal text")
    def test_mixed_font_size(self):
        page = self.page()
        card = self.frame(page, fill="#FFFFFF")
        self.text(card, font_size=None, font_style="Bold")

        candidate = collect([card], page).items[0]

        assert candidate.is_large is False
        assert candidate.requirement.category == ElementType.NORMAL_TEXT


@allure.feature("Scene Traversal")
class TestTraversalLimits(BaseContrastTest):
    # Visit and candidate caps bound the whole scan

    @allure.story("Limits")
    @allure.title("Default candidate cap stops the scan at 2000 and flags truncation")
    def test_default_candidate_cap(self):
        page = self.page()
        card = self.frame(page, fill="#FFFFFF")
        for _ in range(2100):
            self.text(card)

        result = collect([card], page)

        assert len(result.items) == 2000
        assert result.truncated is True
        assert result.visited <= 5000

    @allure.story("Limits")
    @allure.title("Candidate cap is shared across all selection roots")
    def test_candidate_cap_shared(self):
        page = self.page()
        roots = []
        for _ in range(2):
            root = self.frame(page, fill="#FFFFFF")
            for _ in range(3):
                self.text(root)
            roots.append(root)

        result = collect(roots, page, AuditSettings(max_candidates=4))

        assert len(result.items) == 4
        assert result.items[3].node.parent is roots[1]
        assert result.truncated is True

    @allure.story("Limits")
    @allure.title("Visit cap aborts the walk and keeps what was collected")
    def test_visit_cap(self):
        page = self.page()
        card = self.frame(page, fill="#FFFFFF")
        for _ in range(20):
            self.text(card)

        result = collect([card], page, AuditSettings(max_visits=10))

        assert len(result.items) == 9
        assert result.visited == 11
        assert result.truncated is True

    @allure.story("Limits")
    @allure.title("Reaching the candidate cap exactly still reports truncation")
    def test_exact_candidate_cap(self):
        page = self.page()
        card = self.frame(page, fill="#FFFFFF")
        for _ in range(3):
            self.text(card)

        result = collect([card], page, AuditSettings(max_candidates=3))

        assert len(result.items) == 3
        assert result.truncated is True

    @allure.story("Limits")
    @allure.title("A cyclic graph still terminates through the visit cap")
    def test_cycle_terminates(self):
        page = self.page()
        outer = self.frame(page)
        inner = self.frame(outer)
        inner.children.append(outer)

        result = collect([outer], page, AuditSettings(max_visits=50))

        assert result.items == []
        assert result.truncated is True
        assert result.visited == 51

    @allure.story("Limits")
    @allure.title("Context refuses further visits once a cap is reached")
    @pytest.mark.parametrize("visited, collected, expected", [
        (0, 0, True),
        (9, 0, True),
        (10, 0, False),
        (0, 5, False),
    ])
    def test_context_enter(self, visited, collected, expected):
        page = self.page()
        context = TraversalContext(max_visits=10, max_candidates=5, visited=visited, collected=collected)

        assert context.enter(page) is expected
        assert context.aborted is (not expected)
