"""Size and overlap constraints for heading chunks.

Oversized chunks are split into numbered fragments on sentence or word
boundaries, and each chunk after the first may be prefixed with the tail of
its predecessor so that retrieval keeps some surrounding context.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from structure_chunker.models.chunk import SPLIT_CHUNK_TYPE, ChunkNode, new_id
from structure_chunker.models.config import ChunkerConfig

logger = logging.getLogger(__name__)

SENTENCE_TERMINATORS = frozenset(".!?")
OVERLAP_SEPARATOR = "\n\n"


def split_into_sentences(content: str) -> list[str]:
    """Split text into sentences.

    A sentence ends at ".", "!" or "?" when followed by whitespace or the end
    of the text. Sentences are trimmed and blank ones dropped; text without a
    terminator is returned as a single sentence.

    Example:
        >>> split_into_sentences("One. Two! 3.5 is a number? Yes")
        ['One.', 'Two!', '3.5 is a number?', 'Yes']
    """
    sentences: list[str] = []
    start = 0
    for index, char in enumerate(content):
        if char not in SENTENCE_TERMINATORS:
            continue
        at_end = index + 1 == len(content)
        if at_end or content[index + 1].isspace():
            sentences.append(content[start : index + 1])
            start = index + 1
    sentences.append(content[start:])
    return [sentence.strip() for sentence in sentences if sentence.strip()]


def split_into_words(content: str) -> list[str]:
    """Split text on whitespace runs."""
    return content.split()


def _pack_units(units: Iterable[str], max_size: int) -> list[str]:
    """Greedily join units with single spaces into fragments of at most max_size.

    A unit that alone exceeds max_size becomes its own fragment.
    """
    fragments: list[str] = []
    current: list[str] = []
    current_length = 0
    for unit in units:
        separator = 1 if current else 0
        if current and current_length + separator + len(unit) > max_size:
            fragments.append(" ".join(current))
            current = []
            current_length = 0
            separator = 0
        current.append(unit)
        current_length += separator + len(unit)
    if current:
        fragments.append(" ".join(current))
    return fragments


class ConstraintProcessor:
    """Applies a ChunkerConfig's size and overlap settings to chunks.

    Attributes:
        config: The settings being enforced

    Example:
        >>> processor = ConstraintProcessor(ChunkerConfig(
        ...     max_chunk_size=50, min_chunk_size=10, chunk_overlap=0))
        >>> fragments = processor.process(chunks)
    """

    def __init__(self, config: ChunkerConfig) -> None:
        """Initialize the processor with a validated configuration."""
        self.config = config

    def process(self, chunks: Iterable[ChunkNode]) -> list[ChunkNode]:
        """Split oversized chunks, then apply overlap.

        Children of a split chunk are re-pointed at its first fragment so the
        hierarchy stays intact.

        Args:
            chunks: Chunks in document order

        Returns:
            New list of chunks in document order
        """
        processed: list[ChunkNode] = []
        replaced_ids: dict[str, str] = {}

        for chunk in chunks:
            if chunk.parent_id in replaced_ids:
                chunk = chunk.with_updates(parent_id=replaced_ids[chunk.parent_id])

            if chunk.content_length > self.config.max_chunk_size:
                fragments = self.split_chunk(chunk)
                if fragments[0].id != chunk.id:
                    replaced_ids[chunk.id] = fragments[0].id
                processed.extend(fragments)
                continue

            undersized = chunk.content_length < self.config.min_chunk_size
            if undersized and not chunk.has_heading:
                # Undersized body-only chunks are reported, not merged
                logger.debug(
                    f"Chunk '{chunk.id}' is below min_chunk_size "
                    f"({chunk.content_length} < {self.config.min_chunk_size})"
                )
            processed.append(chunk)

        if self.config.chunk_overlap > 0:
            processed = self.apply_overlap(processed)
        return processed

    def split_chunk(self, chunk: ChunkNode) -> list[ChunkNode]:
        """Split one chunk's content into fragments of at most max_chunk_size.

        Sentences longer than the limit are split further on word
        boundaries; a single word longer than the limit is kept whole. The
        first fragment keeps the chunk's titles, later fragments get a
        " (Part N)" suffix and the "Split" chunk type. Every fragment gets a
        new id. A chunk that yields a single fragment is returned unchanged.

        Args:
            chunk: Chunk whose content exceeds the limit

        Returns:
            Fragments in order
        """
        max_size = self.config.max_chunk_size
        units: list[str] = []
        if self.config.split_on_sentences:
            for sentence in split_into_sentences(chunk.content):
                if len(sentence) > max_size:
                    units.extend(split_into_words(sentence))
                else:
                    units.append(sentence)
        else:
            units = split_into_words(chunk.content)

        pieces = _pack_units(units, max_size)
        if len(pieces) <= 1:
            return [chunk]

        logger.debug(
            f"Split chunk '{chunk.clean_title}' ({chunk.content_length} chars) "
            f"into {len(pieces)} fragments"
        )
        fragments: list[ChunkNode] = []
        for index, piece in enumerate(pieces):
            if index == 0:
                fragments.append(chunk.with_updates(id=new_id(), content=piece))
                continue
            suffix = f" (Part {index + 1})"
            fragments.append(
                chunk.with_updates(
                    id=new_id(),
                    content=piece,
                    chunk_type=SPLIT_CHUNK_TYPE,
                    raw_title=chunk.raw_title + suffix,
                    clean_title=chunk.clean_title + suffix,
                    is_heading=False,
                )
            )
        return fragments

    def apply_overlap(self, chunks: list[ChunkNode]) -> list[ChunkNode]:
        """Prefix each chunk with the tail of its predecessor.

        The tail is taken from the predecessor's content before any overlap
        was added. Chunks whose predecessor content is shorter than the
        overlap are left unchanged.
        """
        overlap = self.config.chunk_overlap
        result: list[ChunkNode] = []
        for index, chunk in enumerate(chunks):
            previous = chunks[index - 1].content if index > 0 else ""
            if index == 0 or len(previous) < overlap:
                result.append(chunk)
                continue
            tail = previous[-overlap:]
            result.append(
                chunk.with_updates(content=tail + OVERLAP_SEPARATOR + chunk.content)
            )
        return result
