"""Vectorizers for chunk content.

Key Features:
- Vectorizer protocol for pluggable embedding backends
- PlaceholderVectorizer: deterministic unit vectors with no model download
- EmbeddingServiceVectorizer: wraps any service exposing
  ``generate_embeddings(texts)``, falling back to zero vectors on failure
- enrich_content_with_context: prefix content with its ancestor titles
"""

from __future__ import annotations

import hashlib
import logging
import math
import random
from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable

from structure_chunker.config.defaults import DEFAULT_VECTOR_DIMENSION

logger = logging.getLogger(__name__)

QUERY_PREFIX = "query: "
PASSAGE_PREFIX = "passage: "
CONTEXT_SEPARATOR = ": "


@runtime_checkable
class Vectorizer(Protocol):
    """Protocol for turning text into fixed-size vectors."""

    @property
    def dimension(self) -> int:
        """Length of every vector produced."""
        ...

    async def vectorize(self, text: str, is_query: bool = False) -> list[float]:
        """Vectorize text as a query or as a stored passage."""
        ...


def prefixed_text(text: str, is_query: bool) -> str:
    """Prefix text with "query: " or "passage: "."""
    return (QUERY_PREFIX if is_query else PASSAGE_PREFIX) + text


def enrich_content_with_context(content: str, ancestor_titles: Iterable[str]) -> str:
    """Prefix content with its ancestor titles.

    Example:
        >>> enrich_content_with_context("Body", ["Guide", "Setup"])
        'Guide: Setup: Body'
    """
    titles = [title.strip() for title in ancestor_titles if title and title.strip()]
    if not titles:
        return content
    return CONTEXT_SEPARATOR.join(titles) + CONTEXT_SEPARATOR + content


class PlaceholderVectorizer:
    """Deterministic vectors derived from a hash of the text.

    Equal inputs always give equal vectors. Vectors have unit length, except
    for blank input which gives a zero vector. Useful for tests and for
    pipelines that do not need semantic similarity.

    Attributes:
        dimension: Vector length
    """

    def __init__(self, dimension: int = DEFAULT_VECTOR_DIMENSION) -> None:
        """Initialize the vectorizer.

        Raises:
            ValueError: If dimension is not positive
        """
        if dimension <= 0:
            raise ValueError("dimension must be positive")
        self._dimension = dimension

    @property
    def dimension(self) -> int:
        """Length of every vector produced."""
        return self._dimension

    async def vectorize(self, text: str, is_query: bool = False) -> list[float]:
        """Vectorize text, returning a zero vector for blank input or on failure."""
        if not text or not text.strip():
            return [0.0] * self._dimension
        try:
            return self._generate(prefixed_text(text, is_query))
        except (ValueError, OverflowError, UnicodeError) as e:
            logger.warning(f"Placeholder vector generation failed: {e}")
            return [0.0] * self._dimension

    def _generate(self, text: str) -> list[float]:
        data = text.encode("utf-8")
        seed = int.from_bytes(hashlib.sha256(data).digest()[:8], "big")
        rng = random.Random(seed)
        vector = [rng.uniform(-1.0, 1.0) for _ in range(self._dimension)]

        # Mix in the raw bytes so near-identical texts still diverge
        for index, byte in enumerate(data):
            vector[index % self._dimension] += (byte / 255.0) * 0.1

        norm = math.sqrt(sum(value * value for value in vector))
        if norm == 0.0:
            return [0.0] * self._dimension
        return [value / norm for value in vector]


class EmbeddingServiceVectorizer:
    """Adapts an embedding service to the Vectorizer protocol.

    The service must provide ``async generate_embeddings(texts)`` returning
    one embedding per text. Failures are logged and produce a zero vector so
    that a flaky backend never aborts document processing.

    Attributes:
        service: The wrapped embedding service
        dimension: Expected vector length
    """

    def __init__(
        self, service: Any, dimension: int, use_prefixes: bool = True
    ) -> None:
        """Initialize with a service and the vector length it produces."""
        if dimension <= 0:
            raise ValueError("dimension must be positive")
        self.service = service
        self._dimension = dimension
        self._use_prefixes = use_prefixes

    @property
    def dimension(self) -> int:
        """Length of every vector produced."""
        return self._dimension

    async def vectorize(self, text: str, is_query: bool = False) -> list[float]:
        """Embed text through the service."""
        if not text or not text.strip():
            return [0.0] * self._dimension
        payload = prefixed_text(text, is_query) if self._use_prefixes else text
        try:
            embeddings = await self.service.generate_embeddings([payload])
            return [float(value) for value in embeddings[0]]
        except Exception as e:
            logger.warning(f"Embedding generation failed: {e}")
            return [0.0] * self._dimension
