"""Chunk model for heading-derived document hierarchies.

A chunk is one heading-introduced section of a document: the heading's titles,
the body text that follows it up to the next heading, and a reference to the
enclosing section. Chunks are immutable values; every transformation (body
accumulation, splitting, overlap, keyword enrichment) produces a new value via
``with_updates`` and the owning collection replaces the old one by id.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from ulid import ULID

ROOT_CHUNK_TYPE = "Root"
SPLIT_CHUNK_TYPE = "Split"
PATH_SEPARATOR = " > "


def new_id() -> str:
    """Generate a unique, time-sortable identifier for chunks and graph parts."""
    return str(ULID())


class ChunkCategory(str, Enum):
    """Broad classification of what a chunk holds.

    Attributes:
        CONTENT: Plain body content
        HEADER: Markdown heading sections
        SECTION: Roman numeral or lettered outline sections
        APPENDIX: Appendix sections
        LEGAL: Statute style "§ N" sections
        NUMERIC: Decimal outline sections (1., 1.1, 1.1.1)
        LIST: List blocks from the structural parser
        CODE_BLOCK: Fenced code blocks from the structural parser
        QUOTE: Blockquotes from the structural parser
        TABLE: Pipe tables from the structural parser
    """

    CONTENT = "content"
    HEADER = "header"
    SECTION = "section"
    APPENDIX = "appendix"
    LEGAL = "legal"
    NUMERIC = "numeric"
    LIST = "list"
    CODE_BLOCK = "code_block"
    QUOTE = "quote"
    TABLE = "table"


# Rule name prefix -> category; unknown rule names fall back to CONTENT
_RULE_CATEGORIES: tuple[tuple[str, ChunkCategory], ...] = (
    ("Markdown", ChunkCategory.HEADER),
    ("Numeric", ChunkCategory.NUMERIC),
    ("Legal", ChunkCategory.LEGAL),
    ("Appendix", ChunkCategory.APPENDIX),
    ("Roman", ChunkCategory.SECTION),
    ("Letter", ChunkCategory.SECTION),
)


def category_for_rule(rule_name: str) -> ChunkCategory:
    """Map a chunking rule name to the category of the chunks it produces."""
    for prefix, category in _RULE_CATEGORIES:
        if rule_name.startswith(prefix):
            return category
    return ChunkCategory.CONTENT


@dataclass(frozen=True)
class ChunkNode:
    """One section of a chunked document.

    Attributes:
        level: Hierarchy depth (0 only for the synthetic root, 1+ otherwise)
        chunk_type: Name of the rule that produced the chunk, or a synthetic
            type ("Root", "Split") for generated chunks
        raw_title: The heading line text as matched, trimmed
        clean_title: The heading title without its marker
        content: Body text belonging to this section
        id: Unique identifier
        parent_id: Identifier of the enclosing chunk, None for top-level chunks
        keywords: Ordered keywords assigned during enrichment
        source_id: Caller-supplied document identifier
        heading_hierarchy: Clean titles from the top-level ancestor down to
            this chunk, inclusive
        is_heading: Whether the chunk was introduced by a heading line
        category: Broad classification derived from the producing rule
        start_offset: Character offset of the heading line in the source text
        end_offset: Character offset just past the last body character
        original_markdown: Source text between the two offsets

    Example:
        >>> chunk = ChunkNode(level=1, chunk_type="MarkdownH1",
        ...                   raw_title="# Intro", clean_title="Intro")
        >>> chunk.with_updates(content="Hello").content
        'Hello'
    """

    level: int
    chunk_type: str
    raw_title: str = ""
    clean_title: str = ""
    content: str = ""
    id: str = field(default_factory=new_id)
    parent_id: str | None = None
    keywords: tuple[str, ...] = ()
    source_id: str = ""
    heading_hierarchy: tuple[str, ...] = ()
    is_heading: bool = True
    category: ChunkCategory = ChunkCategory.CONTENT
    start_offset: int = 0
    end_offset: int = 0
    original_markdown: str = ""

    def __post_init__(self) -> None:
        # Accept any iterable for the sequence fields but store tuples
        if not isinstance(self.keywords, tuple):
            object.__setattr__(self, "keywords", tuple(self.keywords))
        if not isinstance(self.heading_hierarchy, tuple):
            object.__setattr__(
                self, "heading_hierarchy", tuple(self.heading_hierarchy)
            )

    @property
    def content_length(self) -> int:
        """Length of the body content in characters."""
        return len(self.content)

    @property
    def total_length(self) -> int:
        """Length of the heading line plus body content."""
        return len(self.raw_title) + len(self.content)

    @property
    def full_path(self) -> str:
        """Heading hierarchy joined into a breadcrumb (e.g. "Guide > Setup")."""
        if self.heading_hierarchy:
            return PATH_SEPARATOR.join(self.heading_hierarchy)
        return self.clean_title

    @property
    def is_root(self) -> bool:
        """True for the synthetic document root used during hierarchy building."""
        # Rules never produce level 0
        return self.level == 0 and self.chunk_type == ROOT_CHUNK_TYPE

    @property
    def is_top_level(self) -> bool:
        """True for chunks without an enclosing chunk."""
        return self.parent_id is None

    @property
    def has_heading(self) -> bool:
        """True when the chunk carries a heading line or heading type."""
        return bool(self.raw_title) or "Heading" in self.chunk_type

    def with_updates(self, **changes: Any) -> ChunkNode:
        """Return a copy of this chunk with the given fields replaced."""
        return replace(self, **changes)
