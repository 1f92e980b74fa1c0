"""Structure chunker - split markdown and outline documents along their headings.

Documents are cut into chunks that follow their heading hierarchy, with
optional size and overlap constraints, keyword enrichment, and a typed
structural graph of markdown blocks for navigation.

Main features:
- Heading detection for markdown, decimal outlines, statute sections,
  appendices, roman numeral and lettered sections
- Parent links between chunks that mirror the heading nesting
- Sentence- or word-boundary splitting of oversized chunks with overlap
- Custom, section-mapped and inherited keywords per chunk
- Structural graph of headings, paragraphs, lists, code, quotes and tables
- OpenTelemetry spans around document processing
"""

from structure_chunker.config.loader import load_chunker_config
from structure_chunker.lib.chunker import StructureChunker
from structure_chunker.lib.errors import (
    ChunkingError,
    ConfigError,
    GraphIntegrityError,
    RuleError,
    StructureChunkerError,
    ValidationError,
)
from structure_chunker.lib.keywords import FrequencyKeywordExtractor, KeywordExtractor
from structure_chunker.lib.rule_engine import (
    ChunkingRule,
    RuleEngine,
    RuleMatch,
    create_default_rules,
)
from structure_chunker.lib.strategies import PatternBasedStrategy, StructuralStrategy
from structure_chunker.lib.vectorizer import PlaceholderVectorizer, Vectorizer
from structure_chunker.models.chunk import ChunkCategory, ChunkNode
from structure_chunker.models.config import ChunkerConfig
from structure_chunker.models.graph import (
    DocumentGraph,
    ElementType,
    GraphEdge,
    RelationshipType,
    StructuralElement,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "ChunkCategory",
    "ChunkerConfig",
    "ChunkingError",
    "ChunkingRule",
    "ChunkNode",
    "ConfigError",
    "create_default_rules",
    "DocumentGraph",
    "ElementType",
    "FrequencyKeywordExtractor",
    "GraphEdge",
    "GraphIntegrityError",
    "KeywordExtractor",
    "load_chunker_config",
    "PatternBasedStrategy",
    "PlaceholderVectorizer",
    "RelationshipType",
    "RuleEngine",
    "RuleError",
    "RuleMatch",
    "StructuralElement",
    "StructuralStrategy",
    "StructureChunker",
    "StructureChunkerError",
    "ValidationError",
    "Vectorizer",
]
