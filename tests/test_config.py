"""Tests for docent configuration."""

from collections.abc import Callable
from dataclasses import fields
from pathlib import Path

import pytest

from docent.config import DocentConfig, DocentSettings, load_config
from docent.exceptions import ConfigurationError


class TestDocentSettings:
    """Tests for DocentSettings."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test default configuration values."""
        for name in ("DOCENT_DOCS_DIR", "DOCENT_CHECK_TIMEOUT", "DOCENT_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

        settings = DocentSettings()
        assert settings.docs_dir == "docs"
        assert settings.check_timeout == 30
        assert settings.git_timeout == 15
        assert settings.log_level == "WARNING"

    def test_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test DOCENT_ environment variables."""
        monkeypatch.setenv("DOCENT_DOCS_DIR", "documentation")
        monkeypatch.setenv("DOCENT_CHECK_TIMEOUT", "45")

        settings = DocentSettings()
        assert settings.docs_dir == "documentation"
        assert settings.check_timeout == 45

    def test_check_timeout_bounds(self) -> None:
        """Test check_timeout bounds validation."""
        assert DocentSettings(check_timeout=1).check_timeout == 1
        assert DocentSettings(check_timeout=600).check_timeout == 600

        with pytest.raises(ValueError):
            DocentSettings(check_timeout=0.5)

        with pytest.raises(ValueError):
            DocentSettings(check_timeout=601)


class TestLoadConfig:
    """Tests for load_config."""

    def test_no_config_file(self, tmp_path: Path) -> None:
        """Test the settings default is used without a config file."""
        config = load_config(tmp_path, DocentSettings(docs_dir="docs"))

        assert config.root == "docs"

    def test_settings_supply_default_root(self, tmp_path: Path) -> None:
        """Test DOCENT_DOCS_DIR feeds the default root."""
        config = load_config(tmp_path, DocentSettings(docs_dir="handbook"))
        assert config.root == "handbook"

    def test_yaml_config(self, tmp_path: Path, write_file: Callable[..., Path]) -> None:
        """Test root is read from .docentrc.yaml."""
        write_file(".docentrc.yaml", "root: documentation\n")

        config = load_config(tmp_path, DocentSettings(docs_dir="docs"))

        assert config.root == "documentation"

    def test_config_names_only_the_docs_root(self) -> None:
        """Test the loaded config carries nothing besides the docs root."""
        assert [field.name for field in fields(DocentConfig)] == ["root"]

    def test_json_config(self, tmp_path: Path, write_file: Callable[..., Path]) -> None:
        """Test root is read from a JSON .docentrc."""
        write_file(".docentrc", '{"root": "manual"}')

        assert load_config(tmp_path, DocentSettings(docs_dir="docs")).root == "manual"

    def test_yaml_takes_precedence(self, tmp_path: Path, write_file: Callable[..., Path]) -> None:
        """Test YAML config files are checked before .docentrc."""
        write_file(".docentrc.yml", "root: from-yml\n")
        write_file(".docentrc", '{"root": "from-json"}')

        assert load_config(tmp_path, DocentSettings()).root == "from-yml"

    def test_empty_config_uses_default(
        self, tmp_path: Path, write_file: Callable[..., Path]
    ) -> None:
        """Test an empty config file keeps the default root."""
        write_file(".docentrc.yaml", "")

        assert load_config(tmp_path, DocentSettings(docs_dir="docs")).root == "docs"

    def test_invalid_json(self, tmp_path: Path, write_file: Callable[..., Path]) -> None:
        """Test malformed JSON raises ConfigurationError."""
        write_file(".docentrc", "{root: ")

        with pytest.raises(ConfigurationError) as exc_info:
            load_config(tmp_path, DocentSettings())

        assert exc_info.value.config_file == ".docentrc"
        assert str(exc_info.value).startswith("Failed to parse config file .docentrc:")

    def test_invalid_yaml(self, tmp_path: Path, write_file: Callable[..., Path]) -> None:
        """Test malformed YAML raises ConfigurationError."""
        write_file(".docentrc.yaml", "root: [unclosed\n")

        with pytest.raises(ConfigurationError):
            load_config(tmp_path, DocentSettings())

    def test_non_mapping(self, tmp_path: Path, write_file: Callable[..., Path]) -> None:
        """Test a top-level list is rejected."""
        write_file(".docentrc.yaml", "- docs\n- more\n")

        with pytest.raises(ConfigurationError) as exc_info:
            load_config(tmp_path, DocentSettings())

        assert "expected a mapping" in str(exc_info.value)

    def test_configuration_error_is_value_error(self) -> None:
        """Test ConfigurationError can be caught as ValueError."""
        assert issubclass(ConfigurationError, ValueError)
