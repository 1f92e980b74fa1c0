"""Pytest configuration and shared fixtures for structure chunker tests."""

import os
import shutil
import tempfile
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest

from structure_chunker.models.chunk import ChunkNode

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def temp_dir() -> Iterator[Path]:
    """Create a temporary directory for test file operations.

    Yields:
        Path to temporary directory

    Cleanup:
        Automatically removes directory after test
    """
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def isolated_env() -> Iterator[dict[str, str]]:
    """Provide isolated environment variables for testing.

    Yields:
        Dictionary of original environment variables

    Cleanup:
        Restores original environment after test
    """
    original_env = os.environ.copy()
    yield original_env
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def fixture_dir() -> Path:
    """Get path to test fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture
def user_guide_markdown() -> str:
    """Markdown user guide with nested headings, lists, code and a table."""
    return (FIXTURES_DIR / "documents" / "user_guide.md").read_text(encoding="utf-8")


@pytest.fixture
def outline_document() -> str:
    """Plain-text policy document numbered with decimal outlines."""
    return (FIXTURES_DIR / "documents" / "policy_outline.txt").read_text(
        encoding="utf-8"
    )


@pytest.fixture
def make_chunk() -> Any:
    """Factory for chunks with sensible defaults."""

    def _make(**overrides: Any) -> ChunkNode:
        values: dict[str, Any] = {
            "level": 1,
            "chunk_type": "MarkdownH1",
            "raw_title": "# Title",
            "clean_title": "Title",
        }
        values.update(overrides)
        return ChunkNode(**values)

    return _make


# Configure pytest
def pytest_configure(config: Any) -> None:
    """Configure pytest with marker options."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests",
    )
    config.addinivalue_line(
        "markers",
        "unit: marks tests as unit tests",
    )
