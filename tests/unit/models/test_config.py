"""Tests for the ChunkerConfig model."""

import pytest
from pydantic import ValidationError

from structure_chunker.models.config import ChunkerConfig


class TestChunkerConfigDefaults:
    """Tests for default values."""

    def test_defaults(self) -> None:
        """Test every field's default."""
        config = ChunkerConfig()
        assert config.max_chunk_size == 1000
        assert config.min_chunk_size == 100
        assert config.chunk_overlap == 200
        assert config.preserve_structure is True
        assert config.split_on_sentences is True
        assert config.extract_keywords is True
        assert config.max_keywords_per_chunk == 10
        assert config.custom_keywords == []
        assert config.section_keyword_mappings == {}
        assert config.prioritize_custom_keywords is True
        assert config.inherit_parent_keywords is False


class TestChunkerConfigValidation:
    """Tests for field and model validation."""

    @pytest.mark.parametrize(
        "field", ["max_chunk_size", "min_chunk_size", "max_keywords_per_chunk"]
    )
    def test_positive_fields(self, field: str) -> None:
        """Test sizes and keyword limits must be positive."""
        with pytest.raises(ValidationError, match=f"{field} must be greater than 0"):
            ChunkerConfig(**{field: 0})

    def test_negative_overlap(self) -> None:
        """Test overlap cannot be negative."""
        with pytest.raises(ValidationError, match="chunk_overlap cannot be negative"):
            ChunkerConfig(chunk_overlap=-1)

    def test_zero_overlap_allowed(self) -> None:
        """Test zero overlap disables overlap."""
        assert ChunkerConfig(chunk_overlap=0).chunk_overlap == 0

    def test_min_must_be_below_max(self) -> None:
        """Test min_chunk_size must be smaller than max_chunk_size."""
        with pytest.raises(ValidationError, match="must be less than max_chunk_size"):
            ChunkerConfig(max_chunk_size=100, min_chunk_size=100, chunk_overlap=0)

    def test_overlap_must_be_below_max(self) -> None:
        """Test chunk_overlap must be smaller than max_chunk_size."""
        with pytest.raises(ValidationError, match="chunk_overlap"):
            ChunkerConfig(max_chunk_size=300, min_chunk_size=10, chunk_overlap=300)

    def test_unknown_field_rejected(self) -> None:
        """Test unknown fields are rejected."""
        with pytest.raises(ValidationError):
            ChunkerConfig(max_size=10)  # type: ignore[call-arg]

    def test_invalid_custom_keywords(self) -> None:
        """Test keyword problems surface as validation errors."""
        with pytest.raises(ValidationError, match="Duplicate keyword"):
            ChunkerConfig(custom_keywords=["api", "API"])

    def test_invalid_section_pattern(self) -> None:
        """Test section mapping patterns must compile."""
        with pytest.raises(ValidationError, match="Invalid regex pattern"):
            ChunkerConfig(section_keyword_mappings={"(": ["x"]})

    def test_validate_assignment(self) -> None:
        """Test assignments are validated too."""
        config = ChunkerConfig()
        with pytest.raises(ValidationError):
            config.max_chunk_size = -5


class TestChunkerConfigPresets:
    """Tests for preset factories."""

    def test_default(self) -> None:
        """Test the default preset matches the defaults."""
        assert ChunkerConfig.default() == ChunkerConfig()

    def test_large_documents(self) -> None:
        """Test the large document preset."""
        config = ChunkerConfig.for_large_documents()
        assert config.max_chunk_size == 2000
        assert config.chunk_overlap == 400
        assert config.min_chunk_size == 200

    def test_small_documents(self) -> None:
        """Test the small document preset."""
        config = ChunkerConfig.for_small_documents()
        assert config.max_chunk_size == 500
        assert config.chunk_overlap == 100
        assert config.min_chunk_size == 50

    def test_performance(self) -> None:
        """Test the performance preset turns off the expensive steps."""
        config = ChunkerConfig.for_performance()
        assert config.max_chunk_size == 1500
        assert config.split_on_sentences is False
        assert config.preserve_structure is False
        assert config.extract_keywords is False

    def test_from_preset_with_overrides(self) -> None:
        """Test overrides are applied on top of a preset."""
        config = ChunkerConfig.from_preset("small_documents", chunk_overlap=0)
        assert config.max_chunk_size == 500
        assert config.chunk_overlap == 0

    def test_unknown_preset(self) -> None:
        """Test unknown preset names are rejected."""
        with pytest.raises(ValueError, match="Unknown preset 'tiny'"):
            ChunkerConfig.from_preset("tiny")

    def test_with_custom_keywords(self) -> None:
        """Test the custom keyword factory."""
        config = ChunkerConfig.with_custom_keywords(
            ["atlas"],
            section_keyword_mappings={"install": ["setup"]},
            inherit_parent_keywords=True,
        )
        assert config.custom_keywords == ["atlas"]
        assert config.section_keyword_mappings == {"install": ["setup"]}
        assert config.prioritize_custom_keywords is True
        assert config.inherit_parent_keywords is True
        assert config.max_chunk_size == 1000
