"""Validation helpers for chunker configuration data."""

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from structure_chunker.lib.errors import ConfigError
from structure_chunker.models.config import ChunkerConfig


def flatten_pydantic_errors(exc: PydanticValidationError) -> list[str]:
    """Flatten a pydantic ValidationError into human-readable messages.

    Model-level failures (such as min_chunk_size not being below
    max_chunk_size) have an empty location and are reported against
    "config".

    Args:
        exc: Pydantic ValidationError exception

    Returns:
        List of messages, one per error

    Example:
        >>> from structure_chunker.models.config import ChunkerConfig
        >>> try:
        ...     ChunkerConfig(max_chunk_size=0)
        ... except PydanticValidationError as e:
        ...     flatten_pydantic_errors(e)[0]
        "Field 'max_chunk_size': Value error, max_chunk_size must be ... (received: 0)"
    """
    errors: list[str] = []

    for error in exc.errors():
        loc = error.get("loc", ())
        field_path = ".".join(str(item) for item in loc) if loc else "config"
        msg = error.get("msg", "Unknown error")

        if error.get("type") == "value_error" and loc:
            input_val = error.get("input")
            formatted = f"Field '{field_path}': {msg} (received: {input_val!r})"
        else:
            formatted = f"Field '{field_path}': {msg}"
        errors.append(formatted)

    return errors if errors else ["Validation failed with unknown error"]


def first_error_field(exc: PydanticValidationError) -> str:
    """Return the dotted location of the first error, or "config"."""
    for error in exc.errors():
        loc = error.get("loc", ())
        if loc:
            return ".".join(str(item) for item in loc)
    return "config"


def config_error_from_validation(exc: PydanticValidationError) -> ConfigError:
    """Convert a pydantic ValidationError into a ConfigError."""
    return ConfigError(first_error_field(exc), "\n".join(flatten_pydantic_errors(exc)))


def build_chunker_config(values: dict[str, Any] | None = None) -> ChunkerConfig:
    """Validate raw settings into a ChunkerConfig.

    Args:
        values: Raw field values, typically parsed from YAML

    Returns:
        Validated ChunkerConfig instance

    Raises:
        ConfigError: If any setting is invalid
    """
    try:
        return ChunkerConfig(**(values or {}))
    except PydanticValidationError as e:
        raise config_error_from_validation(e) from e
