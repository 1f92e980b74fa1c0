"""Configuration loader for the structure chunker.

Loads ``ChunkerConfig`` settings from YAML files. Files may hold the settings
at the top level or under a ``chunker:`` section, may reference environment
variables with the ``${VAR_NAME}`` pattern, and fields missing from the file
can be supplied through ``STRUCTURE_CHUNKER_*`` environment variables.
"""

import logging
import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from structure_chunker.config.defaults import CHUNKER_PRESETS
from structure_chunker.config.validator import build_chunker_config
from structure_chunker.lib.errors import (
    ConfigError,
    FileNotFoundError,
    ValidationError,
)
from structure_chunker.models.config import ChunkerConfig

logger = logging.getLogger(__name__)

CONFIG_SECTION = "chunker"

ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")

# Environment variable to field name mapping
ENV_VAR_MAP = {
    "max_chunk_size": "STRUCTURE_CHUNKER_MAX_CHUNK_SIZE",
    "min_chunk_size": "STRUCTURE_CHUNKER_MIN_CHUNK_SIZE",
    "chunk_overlap": "STRUCTURE_CHUNKER_CHUNK_OVERLAP",
    "max_keywords_per_chunk": "STRUCTURE_CHUNKER_MAX_KEYWORDS_PER_CHUNK",
    "split_on_sentences": "STRUCTURE_CHUNKER_SPLIT_ON_SENTENCES",
    "extract_keywords": "STRUCTURE_CHUNKER_EXTRACT_KEYWORDS",
    "preserve_structure": "STRUCTURE_CHUNKER_PRESERVE_STRUCTURE",
}

_INT_FIELDS = frozenset(
    {"max_chunk_size", "min_chunk_size", "chunk_overlap", "max_keywords_per_chunk"}
)


def substitute_env_vars(text: str, env: Mapping[str, str] | None = None) -> str:
    """Replace ``${VAR_NAME}`` references with environment values.

    Args:
        text: Raw text containing variable references
        env: Environment mapping, defaults to os.environ

    Returns:
        Text with every reference substituted

    Raises:
        ConfigError: If a referenced variable is not set
    """
    env_vars = os.environ if env is None else env

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in env_vars:
            raise ConfigError(
                name, f"Environment variable '{name}' is referenced but not set"
            )
        return env_vars[name]

    return ENV_VAR_PATTERN.sub(_replace, text)


def _parse_env_value(field_name: str, value: str) -> Any:
    """Parse environment variable value to the field's type.

    Raises:
        ValueError: If an integer field holds a non-integer value
    """
    if field_name in _INT_FIELDS:
        return int(value)
    return value.lower() in ("true", "1", "yes", "on")


def _env_overrides(env: Mapping[str, str]) -> dict[str, Any]:
    """Collect settings from STRUCTURE_CHUNKER_* environment variables."""
    overrides: dict[str, Any] = {}
    for field_name, env_var_name in ENV_VAR_MAP.items():
        if env_var_name not in env:
            continue
        try:
            overrides[field_name] = _parse_env_value(field_name, env[env_var_name])
        except ValueError as e:
            raise ValidationError(
                field_name,
                f"Environment variable {env_var_name} is not a valid integer",
                expected="integer",
                actual=env[env_var_name],
            ) from e
    return overrides


def _read_yaml_with_env_substitution(
    path: Path, env: Mapping[str, str] | None
) -> Any:
    """Read a YAML file, substituting environment references before parsing.

    Raises:
        OSError: If file cannot be read
        yaml.YAMLError: If YAML parsing fails
        ConfigError: If env var substitution fails
    """
    raw_text = path.read_text(encoding="utf-8")
    return yaml.safe_load(substitute_env_vars(raw_text, env))


def load_chunker_config(
    file_path: str | Path,
    env: Mapping[str, str] | None = None,
    **overrides: Any,
) -> ChunkerConfig:
    """Load and validate a chunker configuration from YAML.

    Precedence (highest to lowest):
    1. Keyword overrides passed to this function
    2. Settings in the YAML file
    3. STRUCTURE_CHUNKER_* environment variables
    4. ChunkerConfig defaults

    A ``preset`` key in the file applies a named preset; its values rank
    with the file settings, below explicit keys in the same file.

    Args:
        file_path: Path to the YAML file
        env: Environment mapping, defaults to os.environ
        **overrides: Field values that win over the file

    Returns:
        Validated ChunkerConfig instance

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigError: If YAML parsing, substitution or validation fails
        ValidationError: If a STRUCTURE_CHUNKER_* integer variable is malformed

    Example:
        >>> config = load_chunker_config("chunker.yaml", max_chunk_size=800)
    """
    path = Path(file_path)
    env_vars = os.environ if env is None else env

    try:
        content = _read_yaml_with_env_substitution(path, env_vars)
    except OSError as e:
        raise FileNotFoundError(
            str(file_path),
            f"Chunker configuration not found at {file_path}. "
            f"Please ensure the file exists at this path.",
        ) from e
    except yaml.YAMLError as e:
        raise ConfigError(
            "yaml_parse",
            f"Failed to parse YAML file {file_path}: {str(e)}",
        ) from e

    if content is None:
        content = {}
    if not isinstance(content, dict):
        raise ConfigError(
            "yaml_parse", f"Expected a mapping at the top of {file_path}"
        )

    settings = content.get(CONFIG_SECTION, content)
    if settings is None:
        settings = {}
    if not isinstance(settings, dict):
        raise ConfigError(CONFIG_SECTION, "Chunker settings must be a mapping")

    values = dict(settings)
    preset = values.pop("preset", None)
    merged: dict[str, Any] = _env_overrides(env_vars)
    if preset is not None:
        if preset not in CHUNKER_PRESETS:
            available = ", ".join(sorted(CHUNKER_PRESETS))
            raise ConfigError(
                "preset", f"Unknown preset '{preset}'. Available: {available}"
            )
        merged.update(CHUNKER_PRESETS[preset])
    merged.update(values)
    merged.update(overrides)

    config = build_chunker_config(merged)
    logger.debug(
        f"Loaded chunker configuration from {path} "
        f"(max_chunk_size={config.max_chunk_size}, "
        f"chunk_overlap={config.chunk_overlap})"
    )
    return config
