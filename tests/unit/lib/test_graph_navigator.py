"""Tests for GraphNavigator hierarchy queries and validation."""

import pytest

from structure_chunker.lib.errors import GraphIntegrityError
from structure_chunker.lib.graph_navigator import GraphNavigator
from structure_chunker.lib.structural_graph import StructuralGraphBuilder
from structure_chunker.models.graph import (
    ElementType,
    GraphEdge,
    RelationshipType,
    StructuralElement,
)


def _element(content: str, start: int, level: int = 0) -> StructuralElement:
    kind = ElementType.HEADING if level else ElementType.PARAGRAPH
    return StructuralElement(
        element_type=kind,
        content=content,
        start_offset=start,
        end_offset=start + len(content),
        level=level,
    )


@pytest.fixture
def guide_navigator(user_guide_markdown: str) -> GraphNavigator:
    """Navigator over the user guide fixture."""
    elements, edges = StructuralGraphBuilder().build(user_guide_markdown)
    return GraphNavigator(elements, edges)


class TestRootElements:
    """Tests for root_elements()."""

    def test_single_top_heading(self, guide_navigator: GraphNavigator) -> None:
        """Test a document under one H1 has that H1 as its only root."""
        roots = guide_navigator.root_elements()
        assert [r.content for r in roots] == ["User Guide"]

    def test_roots_include_leading_content(self) -> None:
        """Test top-level headings and leading content are roots."""
        elements, edges = StructuralGraphBuilder().build(
            "intro text\n\n# A\nbody\n\n# B"
        )
        roots = GraphNavigator(elements, edges).root_elements()
        assert [r.content for r in roots] == ["intro text", "A", "B"]

    def test_no_elements(self) -> None:
        """Test an empty graph has no roots."""
        assert GraphNavigator([], []).root_elements() == []


class TestChildAndParent:
    """Tests for child_elements() and parent_element()."""

    def test_children_in_document_order(self, guide_navigator: GraphNavigator) -> None:
        """Test children of the top heading are returned in order, once each."""
        root = guide_navigator.root_elements()[0]
        children = guide_navigator.child_elements(root.id)
        assert [c.content for c in children] == [
            "Welcome to the Atlas platform. This guide covers installation and usage.",
            "Installation",
            "Usage",
            "Reference",
        ]

    def test_parent_of_nested_heading(self, guide_navigator: GraphNavigator) -> None:
        """Test a nested heading's parent is the enclosing heading."""
        troubleshooting = next(
            e for e in guide_navigator.elements if e.content == "Troubleshooting"
        )
        parent = guide_navigator.parent_element(troubleshooting.id)
        assert parent is not None
        assert parent.content == "Installation"

    def test_root_has_no_parent(self, guide_navigator: GraphNavigator) -> None:
        """Test roots report no parent."""
        root = guide_navigator.root_elements()[0]
        assert guide_navigator.parent_element(root.id) is None

    def test_unknown_id(self, guide_navigator: GraphNavigator) -> None:
        """Test unknown ids have no children and no parent."""
        assert guide_navigator.child_elements("missing") == []
        assert guide_navigator.parent_element("missing") is None

    def test_parent_child_consistency(self, guide_navigator: GraphNavigator) -> None:
        """Test every child's parent lists it among its children."""
        for element in guide_navigator.elements:
            for child in guide_navigator.child_elements(element.id):
                assert guide_navigator.parent_element(child.id) == element

    def test_ancestors_and_descendants(self, guide_navigator: GraphNavigator) -> None:
        """Test ancestor chains and descendant sets."""
        troubleshooting = next(
            e for e in guide_navigator.elements if e.content == "Troubleshooting"
        )
        assert [a.content for a in guide_navigator.ancestors(troubleshooting.id)] == [
            "Installation",
            "User Guide",
        ]
        root = guide_navigator.root_elements()[0]
        assert len(guide_navigator.descendants(root.id)) == 12

    def test_non_hierarchical_edges_ignored(self) -> None:
        """Test sibling and sequential edges do not create parents."""
        a = _element("A", 0, level=1)
        b = _element("B", 5, level=1)
        edges = [
            GraphEdge(a.id, b.id, RelationshipType.SIBLING),
            GraphEdge(a.id, b.id, RelationshipType.PRECEDES),
        ]
        navigator = GraphNavigator([a, b], edges)
        assert navigator.root_elements() == [a, b]
        assert navigator.child_elements(a.id) == []


class TestValidate:
    """Tests for validate()."""

    def test_builder_output_is_valid(self, guide_navigator: GraphNavigator) -> None:
        """Test graphs from the builder pass validation."""
        guide_navigator.validate()

    def test_two_parents_rejected(self) -> None:
        """Test an element with two hierarchical parents is rejected."""
        a = _element("A", 0, level=1)
        b = _element("B", 5, level=1)
        c = _element("C", 10)
        edges = [
            GraphEdge(a.id, c.id, RelationshipType.CONTAINS),
            GraphEdge(b.id, c.id, RelationshipType.CONTAINS),
        ]
        with pytest.raises(GraphIntegrityError, match="hierarchical parents"):
            GraphNavigator([a, b, c], edges).validate()

    def test_cycle_rejected(self) -> None:
        """Test a hierarchical cycle is rejected."""
        a = _element("A", 0, level=1)
        b = _element("B", 5, level=2)
        edges = [
            GraphEdge(a.id, b.id, RelationshipType.HAS_SUBSECTION),
            GraphEdge(b.id, a.id, RelationshipType.HAS_SUBSECTION),
        ]
        with pytest.raises(GraphIntegrityError, match="cycle"):
            GraphNavigator([a, b], edges).validate()

    def test_overlapping_offsets_rejected(self) -> None:
        """Test overlapping element spans are rejected."""
        a = _element("AAAA", 0)
        b = _element("BBBB", 2)
        with pytest.raises(GraphIntegrityError, match="overlaps"):
            GraphNavigator([a, b], []).validate()

    def test_unknown_edge_target_rejected(self) -> None:
        """Test edges to unknown elements are rejected."""
        a = _element("A", 0, level=1)
        edges = [GraphEdge(a.id, "ghost", RelationshipType.CONTAINS)]
        with pytest.raises(GraphIntegrityError, match="unknown element"):
            GraphNavigator([a], edges).validate()
