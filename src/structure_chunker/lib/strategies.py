"""Chunking strategies.

Two strategies share the chunk model:

- ``PatternBasedStrategy`` scans lines with the heading rule engine, builds a
  heading hierarchy and, when configured, enforces size and overlap
  constraints.
- ``StructuralStrategy`` parses markdown blocks into a structural graph and
  also exposes a one-chunk-per-block view.

Callers that want the graph check for the ``StructureAwareStrategy``
capability rather than a concrete class.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from structure_chunker.lib.constraints import ConstraintProcessor
from structure_chunker.lib.hierarchy_builder import HierarchyBuilder
from structure_chunker.lib.rule_engine import (
    ChunkingRule,
    RuleEngine,
    create_default_rules,
)
from structure_chunker.lib.structural_graph import StructuralGraphBuilder
from structure_chunker.models.chunk import ChunkNode
from structure_chunker.models.config import ChunkerConfig
from structure_chunker.models.graph import GraphEdge, StructuralElement

logger = logging.getLogger(__name__)


@runtime_checkable
class ChunkingStrategy(Protocol):
    """Turns text into an ordered list of chunks."""

    def process_text(self, text: str, source_id: str) -> list[ChunkNode]:
        """Chunk the text."""
        ...


@dataclass(frozen=True)
class StructureResult:
    """Chunks plus the structural graph they were derived from."""

    chunks: list[ChunkNode]
    elements: list[StructuralElement]
    edges: list[GraphEdge]


@runtime_checkable
class StructureAwareStrategy(ChunkingStrategy, Protocol):
    """A strategy that can also produce a structural graph."""

    def process_text_to_structure(self, text: str, source_id: str) -> StructureResult:
        """Chunk the text and return the structural graph with the chunks."""
        ...


class PatternBasedStrategy:
    """Heading-rule chunking with optional size constraints.

    Attributes:
        rule_engine: Engine used to recognize heading lines
        config: Constraint settings; None disables constraint processing

    Example:
        >>> strategy = PatternBasedStrategy()
        >>> chunks = strategy.process_text("# A\\n## B\\n### C\\n## D", "doc")
        >>> [c.level for c in chunks]
        [1, 2, 3, 2]
    """

    def __init__(
        self,
        rules: Iterable[ChunkingRule] | None = None,
        config: ChunkerConfig | None = None,
    ) -> None:
        """Initialize with heading rules (defaults when None) and settings.

        Raises:
            RuleError: If an empty rule set is supplied
        """
        self.rule_engine = RuleEngine(
            create_default_rules() if rules is None else rules
        )
        self.config = config
        self._builder = HierarchyBuilder(self.rule_engine)
        self._constraints = ConstraintProcessor(config) if config is not None else None

    def process_text(self, text: str, source_id: str) -> list[ChunkNode]:
        """Build the heading hierarchy and apply constraints when configured."""
        if not text or not text.strip():
            return []
        chunks = self._builder.build(text, source_id)
        if self._constraints is not None:
            chunks = self._constraints.process(chunks)
        return chunks


class StructuralStrategy:
    """Markdown block parsing with a typed structural graph.

    Attributes:
        builder: Graph builder used for parsing and linking
    """

    def __init__(self, builder: StructuralGraphBuilder | None = None) -> None:
        """Initialize with a graph builder."""
        self.builder = builder or StructuralGraphBuilder()

    def process_text(self, text: str, source_id: str) -> list[ChunkNode]:
        """Chunk the text with one chunk per markdown block."""
        return self.process_text_to_structure(text, source_id).chunks

    def process_text_to_structure(self, text: str, source_id: str) -> StructureResult:
        """Parse text into elements, edges and the derived chunk view."""
        if not text or not text.strip():
            return StructureResult(chunks=[], elements=[], edges=[])
        elements, edges = self.builder.build(text, source_id)
        chunks = self.builder.build_chunks(elements, source_id)
        return StructureResult(chunks=chunks, elements=elements, edges=edges)
