"""Tests for configuration file discovery."""

from __future__ import annotations

from pathlib import Path

import pytest

from playrate.app.app_config import Config
from playrate.core.exceptions import ConfigurationError


@pytest.mark.unit
class TestConfigDiscovery:
    """Tests for Config."""

    def test_explicit_path(self, tmp_path: Path) -> None:
        """An explicit path is loaded as given."""
        path = tmp_path / "custom.yaml"
        path.write_text("resolution:\n  concurrency: 9\n", encoding="utf-8")

        config = Config(str(path))

        assert config.resolved_path == str(path.resolve())
        assert config.load().resolution.concurrency == 9

    def test_env_var_path(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """CONFIG_PATH is used when no path is given."""
        path = tmp_path / "env.yaml"
        path.write_text("{}\n", encoding="utf-8")
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("CONFIG_PATH", str(path))

        assert Config().config_path == str(path)

    def test_default_file_in_working_directory(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """config.yaml in the working directory is the fallback."""
        (tmp_path / "config.yaml").write_text("{}\n", encoding="utf-8")
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("CONFIG_PATH", raising=False)

        assert Config().config_path == "config.yaml"

    def test_no_config_found(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Nothing to load is a configuration error."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("CONFIG_PATH", raising=False)

        with pytest.raises(ConfigurationError, match="No configuration file found"):
            Config()

    def test_load_is_cached(self, tmp_path: Path) -> None:
        """The file is parsed once per Config instance."""
        path = tmp_path / "config.yml"
        path.write_text("{}\n", encoding="utf-8")
        config = Config(str(path))

        assert config.load() is config.load()
