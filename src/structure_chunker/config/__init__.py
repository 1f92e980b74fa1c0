"""Configuration defaults, loading and validation for the structure chunker.

Main components:
- defaults: Size, keyword and vectorizer defaults plus named presets
- loader: Load a ChunkerConfig from YAML with ${VAR_NAME} substitution
- validator: Turn pydantic validation failures into readable messages
"""
