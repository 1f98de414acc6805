"""Unit tests for configuration loading."""

from pathlib import Path

import pytest

from casekit.config import CONFIG_ENV_VAR, load_config, parse_config
from casekit.errors import ConfigError


class TestParseConfig:
    """Tests for parse_config."""

    def test_top_level_mapping(self) -> None:
        """Test a plain mapping of variables."""
        assert parse_config({"user": "alice", "retries": 3}) == {"user": "alice", "retries": "3"}

    def test_config_section(self) -> None:
        """Test variables nested under a config key."""
        data = {"config": {"has.network": True, "empty": None}}

        assert parse_config(data) == {"has.network": "True", "empty": ""}

    def test_empty_document(self) -> None:
        """Test that an empty document is an empty configuration."""
        assert parse_config(None) == {}
        assert parse_config({"config": None}) == {}

    def test_not_a_mapping(self) -> None:
        """Test that non-mapping documents are rejected."""
        with pytest.raises(ConfigError):
            parse_config(["user", "alice"])

    def test_nested_value(self) -> None:
        """Test that non-scalar values are rejected."""
        with pytest.raises(ConfigError):
            parse_config({"users": ["alice", "bob"]})


class TestLoadConfig:
    """Tests for load_config."""

    def test_load_file(self, tmp_path: Path) -> None:
        """Test loading a YAML file."""
        path = tmp_path / "site.yaml"
        path.write_text('config:\n  timeout: "30"\n  user: nobody\n', encoding="utf-8")

        assert load_config(path) == {"timeout": "30", "user": "nobody"}

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test that an explicit missing file is an error."""
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        """Test that malformed YAML is reported as ConfigError."""
        path = tmp_path / "bad.yaml"
        path.write_text("config: [unterminated\n", encoding="utf-8")

        with pytest.raises(ConfigError):
            load_config(path)

    def test_env_var(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test loading the file named by the environment."""
        path = tmp_path / "env.yaml"
        path.write_text("user: bob\n", encoding="utf-8")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))

        assert load_config() == {"user": "bob"}

    def test_no_config(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that no path and no environment means no configuration."""
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)

        assert load_config() is None

    def test_empty_file(self, tmp_path: Path) -> None:
        """Test that an empty file is present but empty."""
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        assert load_config(path) == {}
