"""Tests for configuration storage."""

from __future__ import annotations

import os
import stat
import sys
from pathlib import Path

import pytest

from cost_katana.cli.config import (
    CONFIG_SCHEMA,
    DEFAULT_BASE_URL,
    ConfigStore,
    default_config_path,
    mask_secret,
)
from cost_katana.errors import InvalidConfigValue


class TestConfigStore:
    """Tests for ConfigStore class."""

    def test_set_and_get(self, config_dir: Path) -> None:
        """Test setting and getting values."""
        store = ConfigStore()

        store.set("apiKey", "ck-test-key")
        assert store.get("apiKey") == "ck-test-key"
        assert store.get("defaultModel") == "gpt-4"

    def test_save_and_load(self, config_dir: Path) -> None:
        """Test saving and loading values from file."""
        store1 = ConfigStore()
        store1.set("apiKey", "ck-test-key")
        store1.set("defaultTemperature", "1.5")
        store1.set("debugMode", "yes")
        store1.save()

        store2 = ConfigStore()
        assert store2.get("apiKey") == "ck-test-key"
        assert store2.get("defaultTemperature") == 1.5
        assert store2.get("debugMode") is True

    def test_file_format(self, config_dir: Path) -> None:
        """Test the file is INI with a default section and camelCase keys."""
        store = ConfigStore()
        store.set("baseUrl", "http://localhost:8000")
        store.set("debugMode", True)
        store.save()

        text = (config_dir / "config").read_text()
        assert "[default]" in text
        assert "baseUrl = http://localhost:8000" in text
        assert "debugMode = true" in text

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    def test_file_permissions(self, config_dir: Path) -> None:
        """Test the saved file is owner read/write only."""
        store = ConfigStore()
        store.set("apiKey", "ck-test-key")
        store.save()

        mode = stat.S_IMODE(os.stat(store.path).st_mode)
        assert mode == 0o600

    def test_delete(self, config_dir: Path) -> None:
        """Test deleting a value falls back to the default."""
        store = ConfigStore()
        store.set("defaultModel", "claude-3")
        store.save()

        assert store.delete("defaultModel") is True
        assert store.get("defaultModel") == "gpt-4"
        assert ConfigStore().has("defaultModel") is False
        assert store.delete("defaultModel") is False

    def test_reset(self, config_dir: Path) -> None:
        """Test resetting removes the file."""
        store = ConfigStore()
        store.set("apiKey", "ck-test-key")
        store.save()
        store.reset()

        assert store.get("apiKey") is None
        assert not store.path.exists()

    def test_defaults(self, config_dir: Path) -> None:
        """Test schema defaults for an empty store."""
        store = ConfigStore()
        assert store.get("baseUrl") == DEFAULT_BASE_URL
        assert store.get("defaultTemperature") == 0.7
        assert store.get("defaultMaxTokens") == 2000
        assert store.get("outputFormat") == "table"
        assert store.get("debugMode") is False

    def test_unknown_key(self, config_dir: Path) -> None:
        """Test unknown keys are rejected with the list of valid ones."""
        store = ConfigStore()
        with pytest.raises(InvalidConfigValue, match="valid keys"):
            store.set("colour", "blue")
        with pytest.raises(InvalidConfigValue):
            store.get("colour")

    def test_ignores_unknown_and_invalid_entries(self, config_dir: Path) -> None:
        """Test hand-edited junk in the file does not break loading."""
        (config_dir / "config").write_text(
            "[default]\ncolour = blue\ndefaultMaxTokens = lots\ndefaultModel = claude-3\n"
        )
        store = ConfigStore()
        assert store.get("defaultModel") == "claude-3"
        assert store.get("defaultMaxTokens") == 2000
        assert store.has("defaultMaxTokens") is False

    def test_percent_signs_survive(self, config_dir: Path) -> None:
        """Test values are stored without interpolation."""
        store = ConfigStore()
        store.set("apiKey", "ck-%abc%-key")
        store.save()
        assert ConfigStore().get("apiKey") == "ck-%abc%-key"


class TestEnvironmentOverrides:
    """Tests for environment variable precedence."""

    def test_env_wins_over_file(self, config_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test an env var overrides the stored value."""
        store = ConfigStore()
        store.set("apiKey", "ck-file")
        monkeypatch.setenv("COST_KATANA_API_KEY", "ck-env")

        assert store.get("apiKey") == "ck-env"
        assert store.source("apiKey") == "$COST_KATANA_API_KEY"

    @pytest.mark.parametrize("blank", ["", "   ", "\t\n"])
    def test_blank_env_is_ignored(
        self, config_dir: Path, monkeypatch: pytest.MonkeyPatch, blank: str
    ) -> None:
        """Test a blank env var neither overrides nor fails."""
        monkeypatch.setenv("COST_KATANA_API_KEY", blank)
        monkeypatch.setenv("COST_KATANA_BASE_URL", blank)
        store = ConfigStore()

        assert store.get("apiKey") is None
        assert store.source("apiKey") == "default"
        assert store.get("baseUrl") == DEFAULT_BASE_URL

        store.set("apiKey", "ck-file")
        assert store.get("apiKey") == "ck-file"
        assert store.source("apiKey") == "file"

    def test_env_value_is_trimmed(self, config_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("COST_KATANA_DEFAULT_MODEL", "  gpt-4o \n")
        assert ConfigStore().get("defaultModel") == "gpt-4o"

    def test_sources(self, config_dir: Path) -> None:
        """Test file and default sources."""
        store = ConfigStore()
        store.set("defaultModel", "claude-3")
        assert store.source("defaultModel") == "file"
        assert store.source("baseUrl") == "default"

    def test_config_dir_override(self, config_dir: Path) -> None:
        """Test $COST_KATANA_CONFIG_DIR moves the file."""
        assert default_config_path() == config_dir / "config"


class TestConversion:
    """Tests for typed value conversion."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("true", True), ("1", True), ("On", True), ("false", False), ("no", False), ("0", False)],
    )
    def test_bool(self, raw: str, expected: bool) -> None:
        """Test boolean spellings."""
        assert CONFIG_SCHEMA["debugMode"].convert(raw) is expected

    @pytest.mark.parametrize(
        ("key", "raw", "message"),
        [
            ("debugMode", "maybe", "true/false"),
            ("defaultMaxTokens", "1.5", "invalid integer"),
            ("defaultMaxTokens", "0", "greater than 0"),
            ("defaultTemperature", "hot", "invalid number"),
            ("defaultTemperature", "2.5", "between 0 and 2"),
            ("outputFormat", "yaml", "must be one of"),
            ("baseUrl", "   ", "cannot be empty"),
        ],
    )
    def test_invalid(self, key: str, raw: str, message: str) -> None:
        """Test invalid values are rejected with a reason."""
        with pytest.raises(InvalidConfigValue, match=message):
            CONFIG_SCHEMA[key].convert(raw)


class TestDisplay:
    """Tests for masked display output."""

    def test_mask_long_secret(self) -> None:
        """Test long secrets keep four characters at each end."""
        assert mask_secret("ck-1234567890abcdef") == "ck-1...cdef"

    def test_mask_short_secret(self) -> None:
        """Test short secrets are fully masked."""
        assert mask_secret("short") == "*****"

    def test_records_mask_api_key(self, config_dir: Path) -> None:
        """Test records never show the raw API key."""
        store = ConfigStore()
        store.set("apiKey", "ck-1234567890abcdef")

        records = {r["key"]: r for r in store.records()}
        assert records["apiKey"]["value"] == "ck-1...cdef"
        assert records["apiKey"]["source"] == "file"
        assert records["debugMode"]["value"] == "false"
        assert list(records) == list(CONFIG_SCHEMA)
