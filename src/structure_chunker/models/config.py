"""Chunker configuration model.

Defines ``ChunkerConfig``, the validated settings that govern size
constraints, overlap and keyword enrichment. Invalid combinations are
rejected when the model is built, before any document is processed.
"""

from __future__ import annotations

from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)

from structure_chunker.config.defaults import (
    CHUNKER_PRESETS,
    DEFAULT_CHUNK_OVERLAP,
    DEFAULT_MAX_CHUNK_SIZE,
    DEFAULT_MAX_KEYWORDS_PER_CHUNK,
    DEFAULT_MIN_CHUNK_SIZE,
)
from structure_chunker.lib.validation import (
    validate_keywords,
    validate_section_mappings,
)


class ChunkerConfig(BaseModel):
    """Settings for constraint processing and keyword enrichment.

    Attributes:
        max_chunk_size: Maximum body length in characters before splitting
        min_chunk_size: Minimum body length, reported but not enforced
        chunk_overlap: Trailing characters of the previous chunk to prepend
        preserve_structure: Keep heading structure when processing
        split_on_sentences: Split oversized chunks on sentence boundaries
            rather than word boundaries
        extract_keywords: Run keyword extraction on every chunk
        max_keywords_per_chunk: Cap on the combined keyword list
        custom_keywords: Keywords added to every chunk
        section_keyword_mappings: Title regex -> keywords for matching chunks
        prioritize_custom_keywords: Put custom keywords ahead of extracted ones
        inherit_parent_keywords: Copy the parent chunk's keywords to children

    Example:
        >>> config = ChunkerConfig.for_small_documents()
        >>> config.max_chunk_size
        500
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    max_chunk_size: int = Field(
        default=DEFAULT_MAX_CHUNK_SIZE,
        description="Maximum chunk body length in characters",
    )
    min_chunk_size: int = Field(
        default=DEFAULT_MIN_CHUNK_SIZE,
        description="Minimum chunk body length in characters",
    )
    chunk_overlap: int = Field(
        default=DEFAULT_CHUNK_OVERLAP,
        description="Characters of the previous chunk prepended to each chunk",
    )
    preserve_structure: bool = Field(
        default=True, description="Preserve heading structure while processing"
    )
    split_on_sentences: bool = Field(
        default=True, description="Split on sentence boundaries instead of words"
    )
    extract_keywords: bool = Field(
        default=True, description="Extract keywords for every chunk"
    )
    max_keywords_per_chunk: int = Field(
        default=DEFAULT_MAX_KEYWORDS_PER_CHUNK,
        description="Maximum number of keywords kept per chunk",
    )
    custom_keywords: list[str] = Field(
        default_factory=list, description="Keywords added to every chunk"
    )
    section_keyword_mappings: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Section title regex mapped to keywords for matching chunks",
    )
    prioritize_custom_keywords: bool = Field(
        default=True, description="Place custom keywords before extracted ones"
    )
    inherit_parent_keywords: bool = Field(
        default=False, description="Copy parent chunk keywords to children"
    )

    @field_validator("max_chunk_size", "min_chunk_size", "max_keywords_per_chunk")
    @classmethod
    def validate_positive(cls, v: int, info: ValidationInfo) -> int:
        """Validate size and count settings are positive."""
        if v <= 0:
            raise ValueError(f"{info.field_name} must be greater than 0")
        return v

    @field_validator("chunk_overlap")
    @classmethod
    def validate_overlap(cls, v: int) -> int:
        """Validate overlap is not negative."""
        if v < 0:
            raise ValueError("chunk_overlap cannot be negative")
        return v

    @field_validator("custom_keywords")
    @classmethod
    def validate_custom_keywords(cls, v: list[str]) -> list[str]:
        """Validate custom keywords are well formed and unique."""
        errors = validate_keywords(v)
        if errors:
            raise ValueError("; ".join(errors))
        return v

    @field_validator("section_keyword_mappings")
    @classmethod
    def validate_mappings(cls, v: dict[str, list[str]]) -> dict[str, list[str]]:
        """Validate mapping keys are regexes and values are keyword lists."""
        errors = validate_section_mappings(v)
        if errors:
            raise ValueError("; ".join(errors))
        return v

    @model_validator(mode="after")
    def validate_size_relationships(self) -> ChunkerConfig:
        """Validate min_chunk_size and chunk_overlap against max_chunk_size."""
        if self.min_chunk_size >= self.max_chunk_size:
            raise ValueError(
                f"min_chunk_size ({self.min_chunk_size}) must be less than "
                f"max_chunk_size ({self.max_chunk_size})"
            )
        if self.chunk_overlap >= self.max_chunk_size:
            raise ValueError(
                f"chunk_overlap ({self.chunk_overlap}) must be less than "
                f"max_chunk_size ({self.max_chunk_size})"
            )
        return self

    @classmethod
    def from_preset(cls, name: str, **overrides: Any) -> ChunkerConfig:
        """Build a configuration from a named preset plus overrides.

        Args:
            name: One of "default", "large_documents", "small_documents",
                "performance"
            **overrides: Field values applied on top of the preset

        Raises:
            ValueError: If the preset name is unknown
        """
        if name not in CHUNKER_PRESETS:
            available = ", ".join(sorted(CHUNKER_PRESETS))
            raise ValueError(f"Unknown preset '{name}'. Available: {available}")
        return cls(**{**CHUNKER_PRESETS[name], **overrides})

    @classmethod
    def default(cls) -> ChunkerConfig:
        """Default configuration."""
        return cls.from_preset("default")

    @classmethod
    def for_large_documents(cls) -> ChunkerConfig:
        """Larger chunks and overlap for long documents."""
        return cls.from_preset("large_documents")

    @classmethod
    def for_small_documents(cls) -> ChunkerConfig:
        """Smaller chunks for short documents."""
        return cls.from_preset("small_documents")

    @classmethod
    def for_performance(cls) -> ChunkerConfig:
        """Word splitting with no structure preservation or keyword extraction."""
        return cls.from_preset("performance")

    @classmethod
    def with_custom_keywords(
        cls,
        custom_keywords: list[str],
        section_keyword_mappings: dict[str, list[str]] | None = None,
        prioritize_custom_keywords: bool = True,
        inherit_parent_keywords: bool = False,
    ) -> ChunkerConfig:
        """Default configuration with custom keyword enrichment."""
        return cls(
            custom_keywords=custom_keywords,
            section_keyword_mappings=section_keyword_mappings or {},
            prioritize_custom_keywords=prioritize_custom_keywords,
            inherit_parent_keywords=inherit_parent_keywords,
        )
