"""Navigation over the hierarchical part of a structural graph.

Only HAS_SUBSECTION, PARENT_OF and CONTAINS edges take part in navigation;
sibling and sequential edges are ignored. Duplicate edges between the same
pair (a heading emits both HAS_SUBSECTION and PARENT_OF to each child) count
once.
"""

from __future__ import annotations

from collections.abc import Iterable

from structure_chunker.lib.errors import GraphIntegrityError
from structure_chunker.models.graph import (
    HIERARCHICAL_RELATIONSHIPS,
    GraphEdge,
    StructuralElement,
)


class GraphNavigator:
    """Answers root, child and parent queries for structural elements.

    Example:
        >>> navigator = GraphNavigator(elements, edges)
        >>> [e.content for e in navigator.root_elements()]
        ['Guide']
    """

    def __init__(
        self,
        elements: Iterable[StructuralElement],
        edges: Iterable[GraphEdge],
    ) -> None:
        """Index the elements and their hierarchical edges."""
        self._elements: tuple[StructuralElement, ...] = tuple(elements)
        self._by_id: dict[str, StructuralElement] = {e.id: e for e in self._elements}
        self._position: dict[str, int] = {
            e.id: index for index, e in enumerate(self._elements)
        }
        self._children: dict[str, list[str]] = {}
        self._parents: dict[str, set[str]] = {}

        for edge in edges:
            if not edge.is_hierarchical:
                continue
            children = self._children.setdefault(edge.source_element_id, [])
            if edge.target_element_id not in children:
                children.append(edge.target_element_id)
            self._parents.setdefault(edge.target_element_id, set()).add(
                edge.source_element_id
            )

    @property
    def elements(self) -> tuple[StructuralElement, ...]:
        """All elements in document order."""
        return self._elements

    def get_element(self, element_id: str) -> StructuralElement | None:
        """Look up an element by id."""
        return self._by_id.get(element_id)

    def root_elements(self) -> list[StructuralElement]:
        """Elements with no inbound hierarchical edge, in document order."""
        return [e for e in self._elements if e.id not in self._parents]

    def child_elements(self, element_id: str) -> list[StructuralElement]:
        """Targets of hierarchical edges from an element, in document order."""
        children = [
            self._by_id[child_id]
            for child_id in self._children.get(element_id, [])
            if child_id in self._by_id
        ]
        return sorted(children, key=lambda e: self._position[e.id])

    def parent_element(self, element_id: str) -> StructuralElement | None:
        """Source of the hierarchical edge into an element, or None for roots."""
        parents = self._parents.get(element_id)
        if not parents:
            return None
        # Forest invariant: at most one distinct parent
        return self._by_id.get(next(iter(parents)))

    def ancestors(self, element_id: str) -> list[StructuralElement]:
        """Hierarchical ancestors from the immediate parent up to the root."""
        result: list[StructuralElement] = []
        seen = {element_id}
        parent = self.parent_element(element_id)
        while parent is not None and parent.id not in seen:
            result.append(parent)
            seen.add(parent.id)
            parent = self.parent_element(parent.id)
        return result

    def descendants(self, element_id: str) -> list[StructuralElement]:
        """All hierarchical descendants of an element, in document order."""
        result: list[StructuralElement] = []
        seen = {element_id}
        pending = list(self._children.get(element_id, []))
        while pending:
            child_id = pending.pop()
            if child_id in seen or child_id not in self._by_id:
                continue
            seen.add(child_id)
            result.append(self._by_id[child_id])
            pending.extend(self._children.get(child_id, []))
        return sorted(result, key=lambda e: self._position[e.id])

    def validate(self) -> None:
        """Check the graph invariants.

        Raises:
            GraphIntegrityError: If an edge references an unknown element, an
                element has more than one hierarchical parent, the hierarchy
                has a cycle, or element offsets overlap or go backwards
        """
        for child_id, parents in self._parents.items():
            if child_id not in self._by_id:
                raise GraphIntegrityError(
                    f"Hierarchical edge targets unknown element '{child_id}'"
                )
            unknown = parents - self._by_id.keys()
            if unknown:
                raise GraphIntegrityError(
                    f"Hierarchical edge from unknown element '{sorted(unknown)[0]}'"
                )
            if len(parents) > 1:
                raise GraphIntegrityError(
                    f"Element '{child_id}' has {len(parents)} hierarchical parents"
                )

        for element in self._elements:
            seen = {element.id}
            parent = self.parent_element(element.id)
            while parent is not None:
                if parent.id in seen:
                    raise GraphIntegrityError(
                        f"Hierarchy cycle through element '{element.id}'"
                    )
                seen.add(parent.id)
                parent = self.parent_element(parent.id)

        previous_end = -1
        for element in self._elements:
            if element.start_offset > element.end_offset:
                raise GraphIntegrityError(
                    f"Element '{element.id}' ends before it starts"
                )
            if element.start_offset <= previous_end:
                raise GraphIntegrityError(
                    f"Element '{element.id}' overlaps the previous element"
                )
            previous_end = element.end_offset
