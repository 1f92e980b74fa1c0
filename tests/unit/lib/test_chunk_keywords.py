"""Tests for keyword queries over chunks."""

import pytest

from structure_chunker.lib.chunk_keywords import (
    all_keywords,
    contains_all_keywords,
    contains_any_keyword,
    find_related_by_keywords,
    group_by_shared_keywords,
    keyword_index,
    keyword_similarity,
    top_keywords,
)


@pytest.fixture
def tagged(make_chunk):
    """Three chunks with overlapping keyword sets."""
    return [
        make_chunk(clean_title="Install", keywords=("pip", "Setup", "python")),
        make_chunk(clean_title="Upgrade", keywords=("pip", "python")),
        make_chunk(clean_title="Usage", keywords=("cli",)),
    ]


class TestRelatedChunks:
    """Tests for find_related_by_keywords() and keyword_similarity()."""

    def test_related_excludes_self(self, tagged) -> None:
        """Test the chunk itself is never returned."""
        related = find_related_by_keywords(tagged[0], tagged)
        assert related == [tagged[1]]

    def test_min_shared(self, tagged) -> None:
        """Test the shared keyword threshold is honoured."""
        assert find_related_by_keywords(tagged[0], tagged, min_shared_keywords=3) == []

    def test_no_keywords(self, make_chunk, tagged) -> None:
        """Test chunks without keywords relate to nothing."""
        assert find_related_by_keywords(make_chunk(), tagged) == []

    def test_similarity(self, tagged) -> None:
        """Test Jaccard similarity over case-folded keywords."""
        assert keyword_similarity(tagged[0], tagged[1]) == pytest.approx(2 / 3)
        assert keyword_similarity(tagged[0], tagged[2]) == 0.0

    def test_similarity_empty(self, make_chunk, tagged) -> None:
        """Test similarity with an empty keyword set is zero."""
        assert keyword_similarity(make_chunk(), tagged[0]) == 0.0


class TestContains:
    """Tests for contains_any_keyword() and contains_all_keywords()."""

    def test_any_ignores_case(self, tagged) -> None:
        """Test membership ignores case."""
        assert contains_any_keyword(tagged[0], ["SETUP", "docker"])
        assert not contains_any_keyword(tagged[2], ["pip"])

    def test_all(self, tagged) -> None:
        """Test every keyword must be present."""
        assert contains_all_keywords(tagged[0], ["pip", "python"])
        assert not contains_all_keywords(tagged[1], ["pip", "setup"])

    def test_no_keywords(self, make_chunk) -> None:
        """Test a chunk without keywords contains nothing."""
        assert not contains_any_keyword(make_chunk(), ["pip"])
        assert not contains_all_keywords(make_chunk(), ["pip"])


class TestAggregates:
    """Tests for the multi-chunk keyword summaries."""

    def test_all_keywords(self, tagged) -> None:
        """Test distinct keywords are sorted and keep their first spelling."""
        assert all_keywords(tagged) == ["Setup", "cli", "pip", "python"]

    def test_group_by_shared_keywords(self, make_chunk, tagged) -> None:
        """Test chunks with identical keyword sets are grouped."""
        twin = make_chunk(keywords=("Python", "PIP"))
        groups = group_by_shared_keywords([*tagged, twin])
        assert list(groups) == ["pip|python"]
        assert groups["pip|python"] == [tagged[1], twin]

    def test_group_ignores_small_sets(self, make_chunk) -> None:
        """Test chunks under min_keywords are not grouped."""
        chunks = [make_chunk(keywords=("cli",)), make_chunk(keywords=("cli",))]
        assert group_by_shared_keywords(chunks) == {}
        assert len(group_by_shared_keywords(chunks, min_keywords=1)) == 1

    def test_top_keywords(self, tagged) -> None:
        """Test keyword frequencies are ranked and capped."""
        assert top_keywords(tagged, top_count=2) == [("pip", 2), ("python", 2)]

    def test_keyword_index(self, tagged) -> None:
        """Test each lowercased keyword maps to its chunks."""
        index = keyword_index(tagged)
        assert index["pip"] == [tagged[0], tagged[1]]
        assert index["setup"] == [tagged[0]]
        assert "Setup" not in index
