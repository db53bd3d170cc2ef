"""
Periodic plugin sync scheduling.

Settings live under ``[plugin.auto_sync]`` in the global config; the time of
the last sync is a plain epoch-seconds file in ``~/.linthis``.
"""

import time
import tomllib
from pathlib import Path
from typing import Optional

import questionary
import structlog
from pydantic import BaseModel, Field, ValidationError, field_validator

from linthis import paths

from .errors import ConfigError

log = structlog.get_logger(__name__)

SYNC_MODES = ("auto", "prompt", "disabled")
SECONDS_PER_DAY = 24 * 60 * 60


class AutoSyncConfig(BaseModel):
    """``[plugin.auto_sync]`` settings."""

    enabled: bool = Field(default=True)
    mode: str = Field(default="prompt", description="auto | prompt | disabled")
    interval_days: int = Field(default=7, description="Days between syncs")

    @field_validator("mode")
    @classmethod
    def mode_must_be_valid(cls, v: str) -> str:
        if v not in SYNC_MODES:
            raise ValueError(
                f"Invalid auto_sync.mode '{v}'. Must be one of: {', '.join(SYNC_MODES)}"
            )
        return v

    @field_validator("interval_days")
    @classmethod
    def interval_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("auto_sync.interval_days must be greater than 0")
        return v

    def is_disabled(self) -> bool:
        return not self.enabled or self.mode == "disabled"

    def should_prompt(self) -> bool:
        return self.mode == "prompt"


def load_auto_sync_config(config_path: Optional[Path] = None) -> AutoSyncConfig:
    """Read ``[plugin.auto_sync]``; a missing file or table gives defaults."""
    config_path = config_path or paths.global_config_file()
    if not config_path.exists():
        return AutoSyncConfig()
    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Failed to read {config_path}: {e}") from e

    plugin = data.get("plugin")
    section = plugin.get("auto_sync", {}) if isinstance(plugin, dict) else {}
    try:
        return AutoSyncConfig.model_validate(section)
    except ValidationError as e:
        raise ConfigError(f"Invalid [plugin.auto_sync] in {config_path}: {e}") from e


class AutoSyncManager:
    """Tracks when plugins were last synced."""

    def __init__(self, timestamp_file: Optional[Path] = None):
        self.timestamp_file = timestamp_file or paths.sync_timestamp_file()

    def get_last_sync_time(self) -> Optional[int]:
        if not self.timestamp_file.exists():
            return None
        try:
            raw = self.timestamp_file.read_text().strip()
        except OSError as e:
            raise ConfigError(f"Failed to read {self.timestamp_file}: {e}") from e
        try:
            return int(raw)
        except ValueError as e:
            raise ConfigError(
                f"Invalid timestamp format in {self.timestamp_file}: {raw!r}"
            ) from e

    def update_last_sync_time(self) -> None:
        self.timestamp_file.parent.mkdir(parents=True, exist_ok=True)
        self.timestamp_file.write_text(str(int(time.time())))
        log.debug("plugin_sync_timestamp_updated", path=str(self.timestamp_file))

    def should_sync(self, config: AutoSyncConfig) -> bool:
        if config.is_disabled():
            return False
        last_sync = self.get_last_sync_time()
        if last_sync is None:
            return True
        elapsed = max(0, int(time.time()) - last_sync)
        return elapsed >= config.interval_days * SECONDS_PER_DAY

    def prompt_user(self) -> bool:
        """Ask whether to update now; an empty answer means yes."""
        answer = questionary.confirm(
            "Updates available for plugins. Update now?", default=True
        ).ask()
        return bool(answer)

    def time_since_last_sync(self) -> Optional[str]:
        last_sync = self.get_last_sync_time()
        if last_sync is None:
            return None

        elapsed = max(0, int(time.time()) - last_sync)
        days = elapsed // SECONDS_PER_DAY
        hours = (elapsed % SECONDS_PER_DAY) // 3600

        if days > 0:
            return f"{days} day{'' if days == 1 else 's'} ago"
        if hours > 0:
            return f"{hours} hour{'' if hours == 1 else 's'} ago"
        return "less than an hour ago"
