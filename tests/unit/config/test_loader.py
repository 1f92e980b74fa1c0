"""Tests for loading chunker configuration from YAML."""

from pathlib import Path

import pytest

from structure_chunker.config.loader import (
    ENV_VAR_MAP,
    load_chunker_config,
    substitute_env_vars,
)
from structure_chunker.lib.errors import (
    ConfigError,
    FileNotFoundError,
    ValidationError,
)


def _write(directory: Path, text: str, name: str = "chunker.yaml") -> Path:
    path = directory / name
    path.write_text(text, encoding="utf-8")
    return path


class TestSubstituteEnvVars:
    """Tests for substitute_env_vars()."""

    def test_substitutes_references(self) -> None:
        """Test ${VAR} references are replaced."""
        text = "max_chunk_size: ${SIZE}\nkey: ${NAME}"
        result = substitute_env_vars(text, {"SIZE": "800", "NAME": "atlas"})
        assert result == "max_chunk_size: 800\nkey: atlas"

    def test_text_without_references(self) -> None:
        """Test text without references is unchanged."""
        assert substitute_env_vars("plain: value", {}) == "plain: value"

    def test_missing_variable(self) -> None:
        """Test a missing variable raises ConfigError naming it."""
        with pytest.raises(ConfigError) as exc_info:
            substitute_env_vars("size: ${MISSING_SIZE}", {})
        assert exc_info.value.field == "MISSING_SIZE"

    def test_uses_process_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test os.environ is used when no mapping is given."""
        monkeypatch.setenv("CHUNK_SIZE_FROM_ENV", "640")
        assert substitute_env_vars("${CHUNK_SIZE_FROM_ENV}") == "640"


class TestLoadChunkerConfig:
    """Tests for load_chunker_config()."""

    def test_top_level_settings(self, temp_dir: Path) -> None:
        """Test settings at the top level of the file."""
        path = _write(temp_dir, "max_chunk_size: 800\nchunk_overlap: 50\n")
        config = load_chunker_config(path, env={})
        assert config.max_chunk_size == 800
        assert config.chunk_overlap == 50
        assert config.min_chunk_size == 100

    def test_chunker_section(self, temp_dir: Path) -> None:
        """Test settings under a chunker section."""
        path = _write(
            temp_dir,
            "chunker:\n"
            "  max_chunk_size: 600\n"
            "  custom_keywords:\n"
            "    - atlas\n"
            "  section_keyword_mappings:\n"
            "    install: [setup, pip]\n",
        )
        config = load_chunker_config(path, env={})
        assert config.max_chunk_size == 600
        assert config.custom_keywords == ["atlas"]
        assert config.section_keyword_mappings == {"install": ["setup", "pip"]}

    def test_empty_file_gives_defaults(self, temp_dir: Path) -> None:
        """Test an empty file loads the defaults."""
        config = load_chunker_config(_write(temp_dir, ""), env={})
        assert config.max_chunk_size == 1000

    def test_env_substitution(self, temp_dir: Path) -> None:
        """Test ${VAR} references are resolved before parsing."""
        path = _write(temp_dir, "max_chunk_size: ${CHUNK_SIZE}\n")
        config = load_chunker_config(path, env={"CHUNK_SIZE": "750"})
        assert config.max_chunk_size == 750

    def test_missing_env_variable(self, temp_dir: Path) -> None:
        """Test unresolved references raise ConfigError."""
        path = _write(temp_dir, "max_chunk_size: ${CHUNK_SIZE}\n")
        with pytest.raises(ConfigError, match="CHUNK_SIZE"):
            load_chunker_config(path, env={})

    def test_missing_file(self, temp_dir: Path) -> None:
        """Test a missing file raises the project's FileNotFoundError."""
        missing = temp_dir / "absent.yaml"
        with pytest.raises(FileNotFoundError) as exc_info:
            load_chunker_config(missing, env={})
        assert exc_info.value.path == str(missing)

    def test_invalid_yaml(self, temp_dir: Path) -> None:
        """Test malformed YAML raises ConfigError."""
        path = _write(temp_dir, "max_chunk_size: [unclosed\n")
        with pytest.raises(ConfigError) as exc_info:
            load_chunker_config(path, env={})
        assert exc_info.value.field == "yaml_parse"

    def test_non_mapping_document(self, temp_dir: Path) -> None:
        """Test a YAML list at the top level is rejected."""
        path = _write(temp_dir, "- 1\n- 2\n")
        with pytest.raises(ConfigError, match="Expected a mapping"):
            load_chunker_config(path, env={})

    def test_non_mapping_section(self, temp_dir: Path) -> None:
        """Test a chunker section that is not a mapping is rejected."""
        path = _write(temp_dir, "chunker: fast\n")
        with pytest.raises(ConfigError) as exc_info:
            load_chunker_config(path, env={})
        assert exc_info.value.field == "chunker"

    def test_invalid_values(self, temp_dir: Path) -> None:
        """Test invalid settings raise ConfigError naming the field."""
        path = _write(temp_dir, "max_chunk_size: 0\n")
        with pytest.raises(ConfigError) as exc_info:
            load_chunker_config(path, env={})
        assert exc_info.value.field == "max_chunk_size"

    def test_preset(self, temp_dir: Path) -> None:
        """Test a preset applies below explicit file settings."""
        path = _write(temp_dir, "preset: small_documents\nchunk_overlap: 20\n")
        config = load_chunker_config(path, env={})
        assert config.max_chunk_size == 500
        assert config.min_chunk_size == 50
        assert config.chunk_overlap == 20

    def test_unknown_preset(self, temp_dir: Path) -> None:
        """Test unknown presets raise ConfigError."""
        path = _write(temp_dir, "preset: enormous\n")
        with pytest.raises(ConfigError) as exc_info:
            load_chunker_config(path, env={})
        assert exc_info.value.field == "preset"

    def test_env_fallbacks(self, temp_dir: Path) -> None:
        """Test STRUCTURE_CHUNKER_* variables fill fields missing from the file."""
        path = _write(temp_dir, "chunk_overlap: 10\n")
        env = {
            ENV_VAR_MAP["max_chunk_size"]: "900",
            ENV_VAR_MAP["chunk_overlap"]: "300",
            ENV_VAR_MAP["extract_keywords"]: "false",
        }
        config = load_chunker_config(path, env=env)
        assert config.max_chunk_size == 900
        assert config.chunk_overlap == 10
        assert config.extract_keywords is False

    def test_env_fallback_bad_integer(self, temp_dir: Path) -> None:
        """Test malformed integer variables raise ValidationError."""
        path = _write(temp_dir, "")
        env = {"STRUCTURE_CHUNKER_MAX_CHUNK_SIZE": "large"}
        with pytest.raises(ValidationError) as exc_info:
            load_chunker_config(path, env=env)
        assert exc_info.value.field == "max_chunk_size"
        assert exc_info.value.expected == "integer"
        assert exc_info.value.actual == "large"

    def test_keyword_overrides_win(self, temp_dir: Path) -> None:
        """Test keyword overrides beat file settings."""
        path = _write(temp_dir, "max_chunk_size: 800\n")
        config = load_chunker_config(path, env={}, max_chunk_size=1200)
        assert config.max_chunk_size == 1200

    def test_accepts_string_path(self, temp_dir: Path) -> None:
        """Test string paths are accepted."""
        path = _write(temp_dir, "max_chunk_size: 700\n")
        assert load_chunker_config(str(path), env={}).max_chunk_size == 700
