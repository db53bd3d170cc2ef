"""Tests for path helpers."""
from pathlib import Path

from linthis import paths


class TestPaths:
    """Test environment overrides and defaults."""

    def test_overrides(self, isolated_env):
        assert paths.plugin_cache_dir() == isolated_env / "cache" / "plugins"
        assert paths.global_config_file() == isolated_env / "config" / "config.toml"
        assert paths.sync_timestamp_file() == isolated_env / "home" / ".plugin_sync_last_check"

    def test_project_config(self, temp_dir):
        assert paths.project_config_file(temp_dir) == temp_dir / ".linthis.toml"
        assert paths.project_config_file() == Path.cwd() / ".linthis.toml"

    def test_platform_defaults(self, monkeypatch):
        monkeypatch.delenv("LINTHIS_CACHE_DIR")
        monkeypatch.delenv("LINTHIS_HOME")
        assert paths.cache_root().name == "linthis"
        assert paths.linthis_home() == Path.home() / ".linthis"

    def test_git_timeout(self, monkeypatch):
        assert paths.git_timeout() == paths.DEFAULT_GIT_TIMEOUT
        monkeypatch.setenv("LINTHIS_GIT_TIMEOUT", "42")
        assert paths.git_timeout() == 42
        monkeypatch.setenv("LINTHIS_GIT_TIMEOUT", "soon")
        assert paths.git_timeout() == paths.DEFAULT_GIT_TIMEOUT
        monkeypatch.setenv("LINTHIS_GIT_TIMEOUT", "-1")
        assert paths.git_timeout() == paths.DEFAULT_GIT_TIMEOUT
