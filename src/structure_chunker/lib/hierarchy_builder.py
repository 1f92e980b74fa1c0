"""Build a heading hierarchy of chunks from plain text.

The builder scans the text line by line. Lines matched by the rule engine open
a new chunk whose parent is the nearest open chunk of a lower level; all other
lines accumulate as body text of the most recently opened chunk. Chunks are
kept in an arena list indexed by id, and every body flush replaces the stored
value rather than mutating it.
"""

from __future__ import annotations

import logging

from structure_chunker.lib.rule_engine import RuleEngine, RuleMatch
from structure_chunker.lib.text_lines import split_lines
from structure_chunker.models.chunk import (
    ROOT_CHUNK_TYPE,
    ChunkNode,
    category_for_rule,
)

logger = logging.getLogger(__name__)

ROOT_TITLE = "Document Root"
PARAGRAPH_SEPARATOR = "\n\n"


class HierarchyBuilder:
    """Turns text into an ordered list of heading chunks.

    Attributes:
        rule_engine: Engine used to classify heading lines

    Example:
        >>> builder = HierarchyBuilder(RuleEngine(create_default_rules()))
        >>> chunks = builder.build("# A\\n## B\\nbody", source_id="doc")
        >>> [(c.clean_title, c.level) for c in chunks]
        [('A', 1), ('B', 2)]
    """

    def __init__(self, rule_engine: RuleEngine) -> None:
        """Initialize the builder with a rule engine."""
        self.rule_engine = rule_engine

    def build(self, text: str, source_id: str = "") -> list[ChunkNode]:
        """Build chunks for the text in document order.

        Text before the first heading belongs to a synthetic root and is not
        emitted. The root never appears in the result.

        Args:
            text: Document text
            source_id: Identifier recorded on every chunk

        Returns:
            Chunks in order of their heading lines
        """
        root = ChunkNode(
            level=0,
            chunk_type=ROOT_CHUNK_TYPE,
            raw_title=ROOT_TITLE,
            clean_title=ROOT_TITLE,
            source_id=source_id,
        )
        chunks: list[ChunkNode] = []
        index_by_id: dict[str, int] = {}
        stack: list[ChunkNode] = [root]
        buffer: list[str] = []

        def store(chunk: ChunkNode) -> None:
            if chunk.id in index_by_id:
                chunks[index_by_id[chunk.id]] = chunk
            stack[-1] = chunk

        def flush(section_end: int) -> None:
            owner = stack[-1]
            addition = "".join(buffer).strip()
            buffer.clear()
            updates: dict[str, object] = {}
            if addition:
                updates["content"] = (
                    owner.content + PARAGRAPH_SEPARATOR + addition
                    if owner.content
                    else addition
                )
            if owner.id != root.id:
                end = _trim_end(text, owner.start_offset, section_end)
                updates["end_offset"] = end
                updates["original_markdown"] = text[owner.start_offset : end]
            if updates:
                store(owner.with_updates(**updates))

        offset = 0
        for line in split_lines(text):
            line_start = offset
            offset += len(line)
            match = self.rule_engine.try_match(line.rstrip("\r\n"))
            if match is None:
                buffer.append(line)
                continue

            flush(line_start)
            while stack[-1].level >= match.level:
                stack.pop()
            chunk = self._open_chunk(match, stack, source_id, line_start)
            index_by_id[chunk.id] = len(chunks)
            chunks.append(chunk)
            stack.append(chunk)

        flush(len(text))
        logger.debug(f"Built {len(chunks)} chunks for source '{source_id}'")
        return chunks

    @staticmethod
    def _open_chunk(
        match: RuleMatch, stack: list[ChunkNode], source_id: str, start: int
    ) -> ChunkNode:
        parent = stack[-1]
        # stack[0] is always the synthetic root
        ancestors = [node.clean_title for node in stack[1:]]
        return ChunkNode(
            level=match.level,
            chunk_type=match.chunk_type,
            raw_title=match.raw_title,
            clean_title=match.clean_title,
            parent_id=None if parent is stack[0] else parent.id,
            source_id=source_id,
            heading_hierarchy=(*ancestors, match.clean_title),
            is_heading=True,
            category=category_for_rule(match.chunk_type),
            start_offset=start,
            end_offset=start,
        )


def _trim_end(text: str, start: int, end: int) -> int:
    """Move ``end`` back over trailing whitespace, never past ``start``."""
    while end > start and text[end - 1].isspace():
        end -= 1
    return end
