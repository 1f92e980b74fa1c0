"""Structural graph model: markdown block elements and the edges between them."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from functools import cached_property
from typing import TYPE_CHECKING, Any

from structure_chunker.models.chunk import ChunkNode, new_id

if TYPE_CHECKING:
    from structure_chunker.lib.graph_navigator import GraphNavigator


class ElementType(str, Enum):
    """Kind of markdown block a structural element was parsed from."""

    HEADING = "heading"
    PARAGRAPH = "paragraph"
    LIST = "list"
    CODE_BLOCK = "code_block"
    BLOCKQUOTE = "blockquote"
    TABLE = "table"


class RelationshipType(str, Enum):
    """Typed relationship between two structural elements.

    Attributes:
        HAS_SUBSECTION: Heading to the nearest following heading one level deeper
        CONTAINS: Heading to a non-heading block in its section
        PARENT_OF: Generic parent to child, emitted alongside the two above
        SIBLING: Between same-level headings that share a parent
        PRECEDES: Element to the next element in document order
        FOLLOWS: Element to the previous element in document order
    """

    HAS_SUBSECTION = "HAS_SUBSECTION"
    CONTAINS = "CONTAINS"
    PARENT_OF = "PARENT_OF"
    SIBLING = "SIBLING"
    PRECEDES = "PRECEDES"
    FOLLOWS = "FOLLOWS"


HIERARCHICAL_RELATIONSHIPS: frozenset[RelationshipType] = frozenset(
    {
        RelationshipType.HAS_SUBSECTION,
        RelationshipType.PARENT_OF,
        RelationshipType.CONTAINS,
    }
)

SEQUENTIAL_RELATIONSHIPS: frozenset[RelationshipType] = frozenset(
    {RelationshipType.PRECEDES, RelationshipType.FOLLOWS}
)


@dataclass(frozen=True)
class StructuralElement:
    """A single markdown block with its position in the source text.

    Attributes:
        element_type: Kind of block
        content: Extracted plain text of the block
        start_offset: Offset of the block's first character in the source
        end_offset: Offset just past the block's last character
        level: Heading level (1-6), 0 for non-heading blocks
        original_markdown: Exact source text between the offsets
        start_line: One-based line where the block starts
        end_line: One-based line where the block ends (inclusive)
        source_id: Caller-supplied document identifier
        metadata: Extra block details (block_type, language for code blocks)
        id: Unique identifier
    """

    element_type: ElementType
    content: str
    start_offset: int
    end_offset: int
    level: int = 0
    original_markdown: str = ""
    start_line: int = 0
    end_line: int = 0
    source_id: str = ""
    metadata: dict[str, Any] = field(default_factory=dict, hash=False, compare=False)
    id: str = field(default_factory=new_id)

    @property
    def is_heading(self) -> bool:
        """True for heading blocks."""
        return self.element_type is ElementType.HEADING

    @property
    def length(self) -> int:
        """Number of source characters the element spans."""
        return self.end_offset - self.start_offset


@dataclass(frozen=True)
class GraphEdge:
    """Directed, typed relationship between two structural elements."""

    source_element_id: str
    target_element_id: str
    relationship_type: RelationshipType
    weight: float = 1.0
    id: str = field(default_factory=new_id)
    created_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc), compare=False
    )

    @property
    def is_hierarchical(self) -> bool:
        """True when the edge participates in parent/child navigation."""
        return self.relationship_type in HIERARCHICAL_RELATIONSHIPS

    @property
    def is_sequential(self) -> bool:
        """True for document-order edges."""
        return self.relationship_type in SEQUENTIAL_RELATIONSHIPS


@dataclass(frozen=True)
class DocumentGraph:
    """Result of processing one document.

    Holds the enriched chunk list and, when the strategy in use produces one,
    the structural element graph. Navigation helpers delegate to a lazily
    built ``GraphNavigator``.

    Attributes:
        source_id: Caller-supplied document identifier
        chunks: Enriched chunks in document order
        structural_elements: Parsed block elements in document order
        structural_edges: Typed edges between the elements
    """

    source_id: str
    chunks: tuple[ChunkNode, ...] = ()
    structural_elements: tuple[StructuralElement, ...] = ()
    structural_edges: tuple[GraphEdge, ...] = ()

    def __post_init__(self) -> None:
        for name in ("chunks", "structural_elements", "structural_edges"):
            value = getattr(self, name)
            if not isinstance(value, tuple):
                object.__setattr__(self, name, tuple(value))

    @property
    def has_structural_graph(self) -> bool:
        """True when structural elements were produced for the document."""
        return bool(self.structural_elements)

    @cached_property
    def navigator(self) -> GraphNavigator:
        """Navigator over the structural elements and edges."""
        from structure_chunker.lib.graph_navigator import GraphNavigator

        return GraphNavigator(self.structural_elements, self.structural_edges)

    def root_elements(self) -> list[StructuralElement]:
        """Elements with no hierarchical parent, in document order."""
        return self.navigator.root_elements()

    def child_elements(self, element_id: str) -> list[StructuralElement]:
        """Hierarchical children of an element, in document order."""
        return self.navigator.child_elements(element_id)

    def parent_element(self, element_id: str) -> StructuralElement | None:
        """Hierarchical parent of an element, or None for roots."""
        return self.navigator.parent_element(element_id)

    def chunk_by_id(self, chunk_id: str) -> ChunkNode | None:
        """Look up a chunk by its identifier."""
        for chunk in self.chunks:
            if chunk.id == chunk_id:
                return chunk
        return None
