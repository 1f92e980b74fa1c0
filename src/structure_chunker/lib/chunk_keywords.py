"""Keyword-based queries over enriched chunks.

Keyword comparisons ignore case throughout.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from structure_chunker.models.chunk import ChunkNode


def _folded(keywords: Iterable[str]) -> set[str]:
    return {keyword.casefold() for keyword in keywords}


def find_related_by_keywords(
    chunk: ChunkNode,
    others: Iterable[ChunkNode],
    min_shared_keywords: int = 1,
) -> list[ChunkNode]:
    """Other chunks sharing at least ``min_shared_keywords`` keywords with chunk.

    The chunk itself is never included.
    """
    if not chunk.keywords:
        return []
    source = _folded(chunk.keywords)
    return [
        other
        for other in others
        if other.id != chunk.id
        and len(source & _folded(other.keywords)) >= min_shared_keywords
    ]


def keyword_similarity(chunk: ChunkNode, other: ChunkNode) -> float:
    """Jaccard similarity of two chunks' keyword sets, 0.0 when either is empty."""
    if not chunk.keywords or not other.keywords:
        return 0.0
    first = _folded(chunk.keywords)
    second = _folded(other.keywords)
    return len(first & second) / len(first | second)


def contains_any_keyword(chunk: ChunkNode, keywords: Iterable[str]) -> bool:
    """True when the chunk has at least one of the keywords."""
    if not chunk.keywords:
        return False
    return bool(_folded(chunk.keywords) & _folded(keywords))


def contains_all_keywords(chunk: ChunkNode, keywords: Iterable[str]) -> bool:
    """True when the chunk has every one of the keywords."""
    if not chunk.keywords:
        return False
    return _folded(keywords) <= _folded(chunk.keywords)


def all_keywords(chunks: Iterable[ChunkNode]) -> list[str]:
    """Distinct keywords across chunks, sorted, keeping the first spelling seen."""
    seen: dict[str, str] = {}
    for chunk in chunks:
        for keyword in chunk.keywords:
            seen.setdefault(keyword.casefold(), keyword)
    return sorted(seen.values())


def group_by_shared_keywords(
    chunks: Iterable[ChunkNode], min_keywords: int = 2
) -> dict[str, list[ChunkNode]]:
    """Group chunks that carry exactly the same keyword set.

    Chunks with fewer than ``min_keywords`` keywords are ignored, and only
    groups of two or more chunks are returned. Keys are the sorted keywords
    joined with "|".
    """
    groups: dict[str, list[ChunkNode]] = {}
    for chunk in chunks:
        if len(chunk.keywords) < min_keywords:
            continue
        signature = "|".join(sorted(_folded(chunk.keywords)))
        groups.setdefault(signature, []).append(chunk)
    return {key: members for key, members in groups.items() if len(members) > 1}


def top_keywords(
    chunks: Iterable[ChunkNode], top_count: int = 10
) -> list[tuple[str, int]]:
    """Most frequent keywords across chunks with their counts."""
    counts = Counter(
        keyword.casefold() for chunk in chunks for keyword in chunk.keywords
    )
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return ranked[:top_count]


def keyword_index(chunks: Iterable[ChunkNode]) -> dict[str, list[ChunkNode]]:
    """Map each lowercased keyword to the chunks carrying it, in input order."""
    index: dict[str, list[ChunkNode]] = {}
    for chunk in chunks:
        for keyword in dict.fromkeys(k.casefold() for k in chunk.keywords):
            index.setdefault(keyword, []).append(chunk)
    return index
