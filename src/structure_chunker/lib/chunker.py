"""Document processing orchestrator.

``StructureChunker`` runs a chunking strategy over a document, enriches every
chunk with keywords, and packages the result as a ``DocumentGraph``. Chunks
are enriched one at a time in document order, so parent keywords are always
final before their children are processed, and cancellation is checked
between chunks.

Usage:
    from structure_chunker import ChunkerConfig, StructureChunker

    chunker = StructureChunker(ChunkerConfig.for_small_documents())
    graph = await chunker.process(markdown, source_id="guide.md")
    for chunk in graph.chunks:
        print(chunk.full_path, chunk.keywords)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import Any

from opentelemetry import trace

from structure_chunker.config.validator import build_chunker_config
from structure_chunker.lib.errors import ChunkingError
from structure_chunker.lib.keywords import (
    FrequencyKeywordExtractor,
    KeywordExtractor,
    combine_keywords,
)
from structure_chunker.lib.rule_engine import ChunkingRule
from structure_chunker.lib.strategies import (
    ChunkingStrategy,
    PatternBasedStrategy,
    StructuralStrategy,
    StructureAwareStrategy,
)
from structure_chunker.lib.vectorizer import Vectorizer, enrich_content_with_context
from structure_chunker.models.chunk import ChunkNode, new_id
from structure_chunker.models.config import ChunkerConfig
from structure_chunker.models.graph import DocumentGraph

logger = logging.getLogger(__name__)

# OpenTelemetry tracer for chunking operations
tracer = trace.get_tracer("structure_chunker.chunker")


def _coerce_config(
    config: ChunkerConfig | dict[str, Any] | None,
) -> ChunkerConfig | None:
    """Validate a raw settings mapping into a ChunkerConfig.

    Raises:
        ConfigError: If the settings are invalid
    """
    if config is None or isinstance(config, ChunkerConfig):
        return config
    return build_chunker_config(config)


def _check_cancelled(cancel_event: asyncio.Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise asyncio.CancelledError("Document processing was cancelled")


class StructureChunker:
    """Chunks documents and enriches the chunks with keywords.

    Without a configuration, chunks are not size-constrained and up to 10
    extracted keywords are kept per chunk. With a configuration, the default
    pattern strategy enforces its size and overlap settings and keyword
    enrichment follows its keyword settings.

    Attributes:
        config: Active settings, or None
        strategy: Chunking strategy in use
        keyword_extractor: Keyword extractor in use

    Example:
        >>> chunker = StructureChunker()
        >>> chunks = await chunker.chunk("# Intro\\nHello there")
        >>> chunks[0].clean_title
        'Intro'
    """

    DEFAULT_MAX_KEYWORDS = 10

    def __init__(
        self,
        config: ChunkerConfig | dict[str, Any] | None = None,
        strategy: ChunkingStrategy | None = None,
        keyword_extractor: KeywordExtractor | None = None,
        rules: Iterable[ChunkingRule] | None = None,
    ) -> None:
        """Initialize the chunker.

        Args:
            config: Settings, as a ChunkerConfig or a raw mapping
            strategy: Strategy to use; defaults to a PatternBasedStrategy built
                from ``rules`` and ``config``
            keyword_extractor: Extractor to use; defaults to
                FrequencyKeywordExtractor
            rules: Heading rules for the default strategy

        Raises:
            ConfigError: If a raw configuration mapping is invalid
            RuleError: If an empty rule set is supplied
        """
        self.config = _coerce_config(config)
        self.strategy: ChunkingStrategy = strategy or PatternBasedStrategy(
            rules=rules, config=self.config
        )
        self.keyword_extractor: KeywordExtractor = (
            keyword_extractor or FrequencyKeywordExtractor()
        )

    @classmethod
    def structure_first(
        cls,
        keyword_extractor: KeywordExtractor | None = None,
        config: ChunkerConfig | dict[str, Any] | None = None,
    ) -> StructureChunker:
        """Create a chunker that uses the structural strategy."""
        return cls(
            config=config,
            strategy=StructuralStrategy(),
            keyword_extractor=keyword_extractor,
        )

    @property
    def supports_structure(self) -> bool:
        """True when the strategy can produce a structural graph."""
        return isinstance(self.strategy, StructureAwareStrategy)

    async def process(
        self,
        text: str,
        source_id: str,
        cancel_event: asyncio.Event | None = None,
    ) -> DocumentGraph:
        """Chunk a document and enrich the chunks with keywords.

        Args:
            text: Document text
            source_id: Identifier of the document
            cancel_event: When set, processing stops with CancelledError at the
                next chunk boundary

        Returns:
            DocumentGraph holding the enriched chunks

        Raises:
            ChunkingError: If source_id is blank
            asyncio.CancelledError: If cancel_event is set
        """
        self._validate_source_id(source_id)
        if not text or not text.strip():
            return DocumentGraph(source_id=source_id)
        _check_cancelled(cancel_event)

        with tracer.start_as_current_span(
            "structure_chunker.process",
            attributes={
                "chunker.source_id": source_id,
                "chunker.strategy": type(self.strategy).__name__,
                "chunker.text_length": len(text),
            },
        ) as span:
            chunks = self.strategy.process_text(text, source_id)
            enriched = await self._enrich_chunks(chunks, cancel_event)
            span.set_attribute("chunker.chunk_count", len(enriched))

        logger.debug(f"Processed '{source_id}' into {len(enriched)} chunks")
        return DocumentGraph(source_id=source_id, chunks=tuple(enriched))

    async def process_with_structure(
        self,
        text: str,
        source_id: str,
        cancel_event: asyncio.Event | None = None,
    ) -> DocumentGraph:
        """Chunk a document and keep its structural graph.

        Falls back to ``process`` when the strategy cannot produce a graph.

        Raises:
            ChunkingError: If source_id is blank
            asyncio.CancelledError: If cancel_event is set
        """
        if not isinstance(self.strategy, StructureAwareStrategy):
            logger.debug(
                f"{type(self.strategy).__name__} has no structural graph, "
                f"processing '{source_id}' without one"
            )
            return await self.process(text, source_id, cancel_event)

        self._validate_source_id(source_id)
        if not text or not text.strip():
            return DocumentGraph(source_id=source_id)
        _check_cancelled(cancel_event)

        with tracer.start_as_current_span(
            "structure_chunker.process_with_structure",
            attributes={
                "chunker.source_id": source_id,
                "chunker.strategy": type(self.strategy).__name__,
                "chunker.text_length": len(text),
            },
        ) as span:
            result = self.strategy.process_text_to_structure(text, source_id)
            enriched = await self._enrich_chunks(result.chunks, cancel_event)
            span.set_attribute("chunker.chunk_count", len(enriched))
            span.set_attribute("chunker.element_count", len(result.elements))
            span.set_attribute("chunker.edge_count", len(result.edges))

        return DocumentGraph(
            source_id=source_id,
            chunks=tuple(enriched),
            structural_elements=tuple(result.elements),
            structural_edges=tuple(result.edges),
        )

    async def chunk(self, content: str) -> list[ChunkNode]:
        """Chunk content under a generated source id; blank content gives []."""
        if not content or not content.strip():
            return []
        graph = await self.process(content, source_id=new_id())
        return list(graph.chunks)

    def process_sync(self, text: str, source_id: str) -> DocumentGraph:
        """Run ``process`` to completion outside an event loop."""
        return asyncio.run(self.process(text, source_id))

    async def vectorize_chunks(
        self,
        chunks: Iterable[ChunkNode],
        vectorizer: Vectorizer,
        cancel_event: asyncio.Event | None = None,
    ) -> list[list[float]]:
        """Vectorize chunks in order, prefixing each with its ancestor titles.

        Args:
            chunks: Chunks in document order
            vectorizer: Vectorizer to use
            cancel_event: When set, stops with CancelledError between chunks

        Returns:
            One vector per chunk
        """
        ordered = list(chunks)
        by_id = {chunk.id: chunk for chunk in ordered}
        vectors: list[list[float]] = []
        for chunk in ordered:
            _check_cancelled(cancel_event)
            titles = [ancestor.clean_title for ancestor in _ancestors(chunk, by_id)]
            text = enrich_content_with_context(chunk.content, reversed(titles))
            vectors.append(await vectorizer.vectorize(text))
        logger.debug(f"Vectorized {len(vectors)} chunks")
        return vectors

    async def _enrich_chunks(
        self,
        chunks: list[ChunkNode],
        cancel_event: asyncio.Event | None,
    ) -> list[ChunkNode]:
        enriched: list[ChunkNode] = []
        final_keywords: dict[str, tuple[str, ...]] = {}
        for chunk in chunks:
            _check_cancelled(cancel_event)
            keywords = await self._keywords_for(chunk, final_keywords)
            updated = chunk.with_updates(keywords=keywords)
            final_keywords[updated.id] = updated.keywords
            enriched.append(updated)
        return enriched

    async def _keywords_for(
        self, chunk: ChunkNode, final_keywords: dict[str, tuple[str, ...]]
    ) -> list[str]:
        if self.config is None:
            return await self.keyword_extractor.extract_keywords(
                chunk.content, self.DEFAULT_MAX_KEYWORDS
            )
        if not self.config.extract_keywords:
            return []

        extracted = await self.keyword_extractor.extract_keywords(
            chunk.content, self.config.max_keywords_per_chunk
        )
        parent_keywords = (
            final_keywords.get(chunk.parent_id, ()) if chunk.parent_id else ()
        )
        return combine_keywords(chunk, self.config, extracted, parent_keywords)

    @staticmethod
    def _validate_source_id(source_id: str) -> None:
        if not source_id or not source_id.strip():
            raise ChunkingError("source_id cannot be empty")


def _ancestors(chunk: ChunkNode, by_id: dict[str, ChunkNode]) -> list[ChunkNode]:
    """Ancestors of a chunk from its parent upward, following parent_id."""
    result: list[ChunkNode] = []
    seen = {chunk.id}
    parent_id = chunk.parent_id
    while parent_id is not None and parent_id in by_id and parent_id not in seen:
        parent = by_id[parent_id]
        result.append(parent)
        seen.add(parent_id)
        parent_id = parent.parent_id
    return result
