"""Keyword extraction and per-chunk keyword combination.

Key Features:
- KeywordExtractor protocol for pluggable extractors
- FrequencyKeywordExtractor: frequency ranking with stop word filtering
- combine_keywords: merge custom, section-mapped, inherited and extracted
  keywords according to a ChunkerConfig
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from collections.abc import Iterable, Sequence
from typing import Protocol, runtime_checkable

from structure_chunker.config.defaults import (
    DEFAULT_MAX_KEYWORDS_PER_CHUNK,
    DEFAULT_MIN_KEYWORD_LENGTH,
)
from structure_chunker.lib.validation import sanitize_keywords
from structure_chunker.models.chunk import ChunkNode
from structure_chunker.models.config import ChunkerConfig

logger = logging.getLogger(__name__)

WORD_PATTERN = re.compile(r"\b[a-zA-Z]+\b")

# Common English words with no value as keywords
STOP_WORDS: frozenset[str] = frozenset(
    {
        "a", "an", "and", "are", "as", "at", "be", "by", "for", "from", "has",
        "he", "in", "is", "it", "its", "of", "on", "that", "the", "to", "was",
        "will", "with", "would", "could", "should", "this", "these", "those",
        "they", "them", "their", "there", "where", "when", "what", "who", "how",
        "why", "which", "can", "may", "might", "must", "shall", "have", "had",
        "do", "does", "did", "been", "being", "am", "were", "but", "or", "not",
        "no", "yes", "if", "then", "else", "than", "more", "most", "less",
        "least", "very", "much", "many", "some", "any", "all", "each", "every",
        "both", "either", "neither", "one", "two", "three", "first", "second",
        "third", "last", "next", "previous", "before", "after", "during",
        "while", "until", "since", "because", "so", "therefore", "however",
        "although", "though", "unless", "except", "instead", "rather", "quite",
        "just", "only", "also", "too", "even", "still", "yet", "already",
        "again", "once", "twice", "here", "everywhere", "anywhere", "somewhere",
        "nowhere", "up", "down", "left", "right", "above", "below", "over",
        "under", "through", "across", "around", "between", "among", "within",
        "without", "inside", "outside", "near", "far", "close", "away", "back",
        "forward", "toward", "against", "along", "beside", "behind", "beyond",
        "beneath",
    }
)


@runtime_checkable
class KeywordExtractor(Protocol):
    """Protocol for keyword extractors.

    Implementations return at most ``max_keywords`` keywords, most relevant
    first. Exceptions raised by an extractor propagate to the caller.
    """

    async def extract_keywords(
        self, text: str, max_keywords: int = DEFAULT_MAX_KEYWORDS_PER_CHUNK
    ) -> list[str]:
        """Extract keywords from text."""
        ...


class FrequencyKeywordExtractor:
    """Ranks words by how often they occur.

    Words are runs of ASCII letters, lowercased. Words shorter than
    ``min_word_length`` and stop words are ignored. Ties in frequency are
    broken alphabetically.

    Attributes:
        min_word_length: Shortest word considered
        stop_words: Words never returned

    Example:
        >>> extractor = FrequencyKeywordExtractor()
        >>> await extractor.extract_keywords("Cache the cache. Cache keys.", 2)
        ['cache', 'keys']
    """

    def __init__(
        self,
        min_word_length: int = DEFAULT_MIN_KEYWORD_LENGTH,
        stop_words: Iterable[str] | None = None,
    ) -> None:
        """Initialize the extractor.

        Raises:
            ValueError: If min_word_length is not positive
        """
        if min_word_length <= 0:
            raise ValueError("min_word_length must be positive")
        self.min_word_length = min_word_length
        self.stop_words = (
            STOP_WORDS
            if stop_words is None
            else frozenset(word.lower() for word in stop_words)
        )

    async def extract_keywords(
        self, text: str, max_keywords: int = DEFAULT_MAX_KEYWORDS_PER_CHUNK
    ) -> list[str]:
        """Return the most frequent non-stop words in text."""
        if not text or not text.strip() or max_keywords <= 0:
            return []

        counts = Counter(
            word
            for word in (match.lower() for match in WORD_PATTERN.findall(text))
            if len(word) >= self.min_word_length and word not in self.stop_words
        )
        ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        return [word for word, _ in ranked[:max_keywords]]


def matching_section_keywords(
    title: str, mappings: dict[str, list[str]]
) -> list[str]:
    """Keywords of every mapping whose pattern matches the title (ignoring case)."""
    keywords: list[str] = []
    for pattern, mapped in mappings.items():
        if re.search(pattern, title, re.IGNORECASE):
            keywords.extend(mapped)
    return keywords


def combine_keywords(
    chunk: ChunkNode,
    config: ChunkerConfig,
    extracted: Sequence[str],
    parent_keywords: Sequence[str] = (),
) -> list[str]:
    """Combine custom, section-mapped, inherited and extracted keywords.

    Custom keywords are the configured global keywords, then keywords of
    section mappings matching the chunk's clean title, then (when
    ``inherit_parent_keywords`` is set) the parent's keywords. Custom
    keywords always come first. With ``prioritize_custom_keywords`` the
    extracted keywords only fill the slots the custom keywords leave free;
    otherwise all keywords are merged and the whole list is capped. Keywords
    are sanitized and de-duplicated case-insensitively, and the result never
    exceeds ``max_keywords_per_chunk``.

    Args:
        chunk: The chunk being enriched
        config: Keyword settings
        extracted: Keywords from the extractor, most relevant first
        parent_keywords: Final keywords of the chunk's parent

    Returns:
        Combined keyword list
    """
    custom: list[str] = list(config.custom_keywords)
    custom.extend(
        matching_section_keywords(chunk.clean_title, config.section_keyword_mappings)
    )
    if config.inherit_parent_keywords:
        custom.extend(parent_keywords)

    limit = config.max_keywords_per_chunk
    combined = sanitize_keywords(custom)
    if config.prioritize_custom_keywords:
        remaining = limit - len(combined)
        if remaining > 0:
            additional = [k for k in sanitize_keywords(extracted) if k not in combined]
            combined.extend(additional[:remaining])
    else:
        combined = sanitize_keywords([*combined, *extracted])

    return combined[:limit]
