"""Markdown block parsing and structural graph construction.

``parse_blocks`` splits markdown into block-level pieces (headings,
paragraphs, lists, fenced code, blockquotes, tables) with their line spans.
``StructuralGraphBuilder`` turns those blocks into ``StructuralElement``
values, links them with typed ``GraphEdge`` relationships, and derives a
chunk view with one chunk per element.

Key Features:
- ATX (``# Title``) and setext (underlined) headings
- Fenced code blocks with ``` or ~~~, unterminated fences run to the end
- Inline markup (emphasis, code spans, links, images) reduced to plain text
- Exact source spans: ``original_markdown == text[start_offset:end_offset]``
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from itertools import pairwise

from structure_chunker.lib.graph_navigator import GraphNavigator
from structure_chunker.lib.text_lines import split_lines
from structure_chunker.models.chunk import ChunkCategory, ChunkNode
from structure_chunker.models.graph import (
    ElementType,
    GraphEdge,
    RelationshipType,
    StructuralElement,
)

logger = logging.getLogger(__name__)

ATX_HEADING_PATTERN = re.compile(r"^ {0,3}(#{1,6})(?:[ \t]+(.*?))?[ \t]*$")
ATX_CLOSING_PATTERN = re.compile(r"(?:^|[ \t]+)#+$")
SETEXT_UNDERLINE_PATTERN = re.compile(r"^ {0,3}(=+|-+)[ \t]*$")
FENCE_PATTERN = re.compile(r"^ {0,3}(`{3,}|~{3,})[ \t]*([^`\s]*)")
THEMATIC_BREAK_PATTERN = re.compile(r"^ {0,3}([-*_])(?:[ \t]*\1){2,}[ \t]*$")
BLOCKQUOTE_PATTERN = re.compile(r"^ {0,3}> ?(.*)$")
LIST_ITEM_PATTERN = re.compile(r"^ {0,3}(?:[-*+]|\d{1,9}[.)])(?:[ \t]+(.*))?$")
TABLE_ROW_PATTERN = re.compile(r"^ {0,3}\|")
TABLE_DELIMITER_PATTERN = re.compile(r"^[\s|:\-]+$")

LIST_BULLET = "• "

# Inline markup -> replacement, applied in order
INLINE_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"`([^`]+)`"), r"\1"),
    (re.compile(r"!\[([^\]]*)\]\([^)]*\)"), r"\1"),
    (re.compile(r"\[([^\]]+)\]\([^)]*\)"), r"\1"),
    (re.compile(r"(\*\*|__)(.+?)\1"), r"\2"),
    (re.compile(r"(?<![\w*])\*(?!\s)(.+?)(?<!\s)\*(?![\w*])"), r"\1"),
    (re.compile(r"(?<![\w_])_(?!\s)(.+?)(?<!\s)_(?![\w_])"), r"\1"),
)

# Display names for non-heading chunk titles ("Paragraph 3", "Code Block 1")
ELEMENT_LABELS: dict[ElementType, str] = {
    ElementType.PARAGRAPH: "Paragraph",
    ElementType.LIST: "List",
    ElementType.CODE_BLOCK: "Code Block",
    ElementType.BLOCKQUOTE: "Blockquote",
    ElementType.TABLE: "Table",
}

ELEMENT_CATEGORIES: dict[ElementType, ChunkCategory] = {
    ElementType.HEADING: ChunkCategory.HEADER,
    ElementType.PARAGRAPH: ChunkCategory.CONTENT,
    ElementType.LIST: ChunkCategory.LIST,
    ElementType.CODE_BLOCK: ChunkCategory.CODE_BLOCK,
    ElementType.BLOCKQUOTE: ChunkCategory.QUOTE,
    ElementType.TABLE: ChunkCategory.TABLE,
}

HEADING_CHUNK_TYPE = "Markdown"


@dataclass(frozen=True)
class MarkdownBlock:
    """A parsed block with its inclusive, zero-based line span.

    Attributes:
        element_type: Kind of block
        content: Plain text extracted from the block
        start_line: First line of the block
        end_line: Last line of the block
        level: Heading level, 0 for other blocks
        language: Info string of a fenced code block
    """

    element_type: ElementType
    content: str
    start_line: int
    end_line: int
    level: int = 0
    language: str = ""


def strip_inline_markup(text: str) -> str:
    """Reduce inline markdown to its visible text.

    Example:
        >>> strip_inline_markup("Use **bold** and [links](http://x)")
        'Use bold and links'
    """
    for pattern, replacement in INLINE_PATTERNS:
        text = pattern.sub(replacement, text)
    return text.strip()


def _is_blank(line: str) -> bool:
    return not line.strip()


def _starts_block(line: str) -> bool:
    """True when the line opens a block that interrupts a paragraph."""
    return bool(
        ATX_HEADING_PATTERN.match(line)
        or FENCE_PATTERN.match(line)
        or THEMATIC_BREAK_PATTERN.match(line)
        or BLOCKQUOTE_PATTERN.match(line)
        or LIST_ITEM_PATTERN.match(line)
        or TABLE_ROW_PATTERN.match(line)
    )


def _table_cells(row: str) -> list[str]:
    cells = row.strip().strip("|").split("|")
    return [strip_inline_markup(cell) for cell in cells]


def parse_blocks(text: str) -> list[MarkdownBlock]:
    """Split markdown text into blocks in document order.

    Thematic breaks and blank lines produce no blocks.

    Args:
        text: Markdown source

    Returns:
        Blocks with non-overlapping, increasing line spans
    """
    lines = [line.rstrip("\r\n") for line in split_lines(text)]
    blocks: list[MarkdownBlock] = []
    i = 0
    n = len(lines)

    while i < n:
        line = lines[i]

        if _is_blank(line):
            i += 1
            continue

        fence = FENCE_PATTERN.match(line)
        if fence:
            marker = fence.group(1)
            closing = re.compile(
                rf"^ {{0,3}}{re.escape(marker[0])}{{{len(marker)},}}[ \t]*$"
            )
            body: list[str] = []
            j = i + 1
            while j < n and not closing.match(lines[j]):
                body.append(lines[j])
                j += 1
            end = min(j, n - 1)
            blocks.append(
                MarkdownBlock(
                    element_type=ElementType.CODE_BLOCK,
                    content="\n".join(body),
                    start_line=i,
                    end_line=end,
                    language=fence.group(2),
                )
            )
            i = end + 1
            continue

        heading = ATX_HEADING_PATTERN.match(line)
        if heading:
            title = ATX_CLOSING_PATTERN.sub("", heading.group(2) or "")
            blocks.append(
                MarkdownBlock(
                    element_type=ElementType.HEADING,
                    content=strip_inline_markup(title),
                    start_line=i,
                    end_line=i,
                    level=len(heading.group(1)),
                )
            )
            i += 1
            continue

        if THEMATIC_BREAK_PATTERN.match(line):
            i += 1
            continue

        if BLOCKQUOTE_PATTERN.match(line):
            quoted: list[str] = []
            j = i
            while j < n:
                quote = BLOCKQUOTE_PATTERN.match(lines[j])
                if not quote:
                    break
                quoted.append(quote.group(1).strip())
                j += 1
            blocks.append(
                MarkdownBlock(
                    element_type=ElementType.BLOCKQUOTE,
                    content=strip_inline_markup("\n".join(quoted)),
                    start_line=i,
                    end_line=j - 1,
                )
            )
            i = j
            continue

        if TABLE_ROW_PATTERN.match(line):
            rows: list[str] = []
            j = i
            while j < n and TABLE_ROW_PATTERN.match(lines[j]):
                if not TABLE_DELIMITER_PATTERN.match(lines[j]):
                    rows.append(" | ".join(_table_cells(lines[j])))
                j += 1
            blocks.append(
                MarkdownBlock(
                    element_type=ElementType.TABLE,
                    content="\n".join(rows),
                    start_line=i,
                    end_line=j - 1,
                )
            )
            i = j
            continue

        item = LIST_ITEM_PATTERN.match(line)
        if item:
            i = _parse_list(lines, i, item, blocks)
            continue

        i = _parse_paragraph(lines, i, blocks)

    return blocks


def _parse_list(
    lines: list[str], start: int, first: re.Match[str], blocks: list[MarkdownBlock]
) -> int:
    """Consume a list starting at ``start``; return the next unread line."""
    items = [first.group(1) or ""]
    n = len(lines)
    j = start + 1
    while j < n:
        line = lines[j]
        if _is_blank(line):
            k = j
            while k < n and _is_blank(lines[k]):
                k += 1
            if k < n and (LIST_ITEM_PATTERN.match(lines[k]) or lines[k][:1] in " \t"):
                j = k
                continue
            break
        if THEMATIC_BREAK_PATTERN.match(line):
            break
        item = LIST_ITEM_PATTERN.match(line) or LIST_ITEM_PATTERN.match(line.lstrip())
        if item:
            items.append(item.group(1) or "")
        elif line[:1] in " \t":
            items[-1] = f"{items[-1]} {line.strip()}".strip()
        else:
            break
        j += 1

    content = "\n".join(LIST_BULLET + strip_inline_markup(entry) for entry in items)
    blocks.append(
        MarkdownBlock(
            element_type=ElementType.LIST,
            content=content,
            start_line=start,
            end_line=j - 1,
        )
    )
    return j


def _parse_paragraph(lines: list[str], start: int, blocks: list[MarkdownBlock]) -> int:
    """Consume a paragraph (or setext heading); return the next unread line."""
    collected = [lines[start].strip()]
    n = len(lines)
    j = start + 1
    while j < n:
        line = lines[j]
        underline = SETEXT_UNDERLINE_PATTERN.match(line)
        if underline:
            blocks.append(
                MarkdownBlock(
                    element_type=ElementType.HEADING,
                    content=strip_inline_markup(" ".join(collected)),
                    start_line=start,
                    end_line=j,
                    level=1 if underline.group(1).startswith("=") else 2,
                )
            )
            return j + 1
        if _is_blank(line) or _starts_block(line):
            break
        collected.append(line.strip())
        j += 1

    blocks.append(
        MarkdownBlock(
            element_type=ElementType.PARAGRAPH,
            content=strip_inline_markup(" ".join(collected)),
            start_line=start,
            end_line=j - 1,
        )
    )
    return j


class StructuralGraphBuilder:
    """Builds structural elements, their edges, and a chunk view.

    Edges produced:
    - HAS_SUBSECTION and PARENT_OF from a heading to each heading nested
      directly beneath it
    - CONTAINS and PARENT_OF from a heading to each non-heading block in its
      section
    - SIBLING in both directions between consecutive same-level headings
      sharing a parent
    - PRECEDES and FOLLOWS between every adjacent pair of elements

    Attributes:
        validate: Run graph integrity checks on every build
    """

    def __init__(self, validate: bool = True) -> None:
        """Initialize the builder."""
        self.validate = validate

    def build_elements(self, text: str, source_id: str = "") -> list[StructuralElement]:
        """Parse text into structural elements with exact source offsets."""
        line_starts: list[int] = []
        offset = 0
        raw_lines = split_lines(text)
        for line in raw_lines:
            line_starts.append(offset)
            offset += len(line)

        elements: list[StructuralElement] = []
        for block in parse_blocks(text):
            start = line_starts[block.start_line]
            end = line_starts[block.end_line] + len(
                raw_lines[block.end_line].rstrip("\r\n")
            )
            metadata: dict[str, str] = {"block_type": block.element_type.value}
            if block.language:
                metadata["language"] = block.language
            elements.append(
                StructuralElement(
                    element_type=block.element_type,
                    content=block.content,
                    start_offset=start,
                    end_offset=end,
                    level=block.level,
                    original_markdown=text[start:end],
                    start_line=block.start_line + 1,
                    end_line=block.end_line + 1,
                    source_id=source_id,
                    metadata=metadata,
                )
            )
        return elements

    def build_edges(self, elements: list[StructuralElement]) -> list[GraphEdge]:
        """Link elements with hierarchical, sibling and sequential edges."""
        edges: list[GraphEdge] = []
        heading_stack: list[StructuralElement] = []
        last_child_heading: dict[str | None, StructuralElement] = {}

        def link(
            source: StructuralElement,
            target: StructuralElement,
            kind: RelationshipType,
        ) -> None:
            edges.append(GraphEdge(source.id, target.id, kind))

        for element in elements:
            if element.is_heading:
                while heading_stack and heading_stack[-1].level >= element.level:
                    heading_stack.pop()
                parent = heading_stack[-1] if heading_stack else None
                if parent is not None:
                    link(parent, element, RelationshipType.HAS_SUBSECTION)
                    link(parent, element, RelationshipType.PARENT_OF)

                parent_key = parent.id if parent is not None else None
                previous = last_child_heading.get(parent_key)
                if previous is not None and previous.level == element.level:
                    link(previous, element, RelationshipType.SIBLING)
                    link(element, previous, RelationshipType.SIBLING)
                last_child_heading[parent_key] = element
                heading_stack.append(element)
            elif heading_stack:
                owner = heading_stack[-1]
                link(owner, element, RelationshipType.CONTAINS)
                link(owner, element, RelationshipType.PARENT_OF)

        for current, following in pairwise(elements):
            link(current, following, RelationshipType.PRECEDES)
            link(following, current, RelationshipType.FOLLOWS)

        return edges

    def build(
        self, text: str, source_id: str = ""
    ) -> tuple[list[StructuralElement], list[GraphEdge]]:
        """Parse text and link the resulting elements.

        Raises:
            GraphIntegrityError: If validation is enabled and the graph is
                malformed
        """
        elements = self.build_elements(text, source_id)
        edges = self.build_edges(elements)
        if self.validate:
            GraphNavigator(elements, edges).validate()
        logger.debug(
            f"Built structural graph for '{source_id}': "
            f"{len(elements)} elements, {len(edges)} edges"
        )
        return elements, edges

    def build_chunks(
        self, elements: list[StructuralElement], source_id: str = ""
    ) -> list[ChunkNode]:
        """Derive one chunk per element, parented by the owning heading chunk."""
        chunks: list[ChunkNode] = []
        heading_stack: list[tuple[StructuralElement, ChunkNode]] = []
        label_counts: dict[ElementType, int] = {}

        for element in elements:
            category = ELEMENT_CATEGORIES[element.element_type]
            if element.is_heading:
                while heading_stack and heading_stack[-1][0].level >= element.level:
                    heading_stack.pop()
                parent_chunk = heading_stack[-1][1] if heading_stack else None
                chunk = ChunkNode(
                    level=element.level,
                    chunk_type=HEADING_CHUNK_TYPE,
                    raw_title=split_lines(element.original_markdown)[0].strip(),
                    clean_title=element.content,
                    content=element.content,
                    parent_id=parent_chunk.id if parent_chunk else None,
                    source_id=source_id,
                    heading_hierarchy=(
                        *(node.clean_title for _, node in heading_stack),
                        element.content,
                    ),
                    is_heading=True,
                    category=category,
                    start_offset=element.start_offset,
                    end_offset=element.end_offset,
                    original_markdown=element.original_markdown,
                )
                heading_stack.append((element, chunk))
            else:
                count = label_counts.get(element.element_type, 0) + 1
                label_counts[element.element_type] = count
                title = f"{ELEMENT_LABELS[element.element_type]} {count}"
                owner = heading_stack[-1][1] if heading_stack else None
                chunk = ChunkNode(
                    level=owner.level + 1 if owner else 1,
                    chunk_type=ELEMENT_LABELS[element.element_type].replace(" ", ""),
                    clean_title=title,
                    content=element.content,
                    parent_id=owner.id if owner else None,
                    source_id=source_id,
                    heading_hierarchy=tuple(
                        node.clean_title for _, node in heading_stack
                    ),
                    is_heading=False,
                    category=category,
                    start_offset=element.start_offset,
                    end_offset=element.end_offset,
                    original_markdown=element.original_markdown,
                )
            chunks.append(chunk)
        return chunks
