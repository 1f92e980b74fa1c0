"""Default configuration values and presets for the structure chunker."""

# Size constraints, in characters
DEFAULT_MAX_CHUNK_SIZE = 1000
DEFAULT_MIN_CHUNK_SIZE = 100
DEFAULT_CHUNK_OVERLAP = 200

# Keyword enrichment
DEFAULT_MAX_KEYWORDS_PER_CHUNK = 10
DEFAULT_MIN_KEYWORD_LENGTH = 3

# Placeholder vectorizer output size
DEFAULT_VECTOR_DIMENSION = 1024

# Named presets applied on top of the defaults
CHUNKER_PRESETS: dict[str, dict[str, int | bool]] = {
    "default": {},
    "large_documents": {
        "max_chunk_size": 2000,
        "chunk_overlap": 400,
        "min_chunk_size": 200,
    },
    "small_documents": {
        "max_chunk_size": 500,
        "chunk_overlap": 100,
        "min_chunk_size": 50,
    },
    "performance": {
        "max_chunk_size": 1500,
        "chunk_overlap": 150,
        "min_chunk_size": 150,
        "preserve_structure": False,
        "split_on_sentences": False,
        "extract_keywords": False,
    },
}
