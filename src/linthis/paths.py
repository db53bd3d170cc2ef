"""
Canonical path helpers for linthis caches and configuration files.

Every module that needs to locate the plugin cache, the global or project
configuration, or the auto-sync timestamp should import from here instead of
computing paths inline.
"""

import os
from pathlib import Path
from typing import Optional

import structlog
from platformdirs import user_cache_dir, user_config_dir

log = structlog.get_logger(__name__)

APP_NAME = "linthis"
PROJECT_CONFIG_FILE = ".linthis.toml"
GLOBAL_CONFIG_FILE = "config.toml"
DEFAULT_GIT_TIMEOUT = 300


# ── directory roots ──────────────────────────────────────────────────────────

def cache_root() -> Path:
    """Platform cache directory (~/.cache/linthis on Linux)."""
    override = os.getenv("LINTHIS_CACHE_DIR")
    if override:
        return Path(override).expanduser()
    return Path(user_cache_dir(APP_NAME, appauthor=False))


def plugin_cache_dir() -> Path:
    """Root of the plugin cache; one subdirectory per host/org/repo."""
    return cache_root() / "plugins"


def config_root() -> Path:
    """Platform config directory (~/.config/linthis on Linux)."""
    override = os.getenv("LINTHIS_CONFIG_DIR")
    if override:
        return Path(override).expanduser()
    return Path(user_config_dir(APP_NAME, appauthor=False))


def linthis_home() -> Path:
    """~/.linthis, home of per-user state such as the sync timestamp."""
    override = os.getenv("LINTHIS_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".linthis"


# ── configuration files ──────────────────────────────────────────────────────

def global_config_file() -> Path:
    """Global alias table."""
    return config_root() / GLOBAL_CONFIG_FILE


def project_config_file(project_dir: Optional[Path] = None) -> Path:
    """Project alias table, ``.linthis.toml`` in the working directory."""
    return (project_dir or Path.cwd()) / PROJECT_CONFIG_FILE


def sync_timestamp_file() -> Path:
    """File holding the epoch seconds of the last plugin sync."""
    return linthis_home() / ".plugin_sync_last_check"


# ── subprocess limits ────────────────────────────────────────────────────────

def git_timeout() -> int:
    """Deadline in seconds for a single git invocation."""
    raw = os.getenv("LINTHIS_GIT_TIMEOUT")
    if raw:
        try:
            value = int(raw)
            if value > 0:
                return value
        except ValueError:
            pass
        log.debug("bad_git_timeout_env", value=raw, fallback=DEFAULT_GIT_TIMEOUT)
    return DEFAULT_GIT_TIMEOUT
