"""Plugin error taxonomy.

Every failure raised by the plugin subsystem derives from ``PluginError`` so
callers can isolate one bad source without catching unrelated exceptions.
"""

from pathlib import Path
from typing import Union

GIT_INSTALL_HINT = (
    "Git is not installed. Please install Git:\n"
    "  - Linux: sudo apt install git\n"
    "  - macOS: brew install git\n"
    "  - Windows: https://git-scm.com/download/win"
)


class PluginError(RuntimeError):
    """Base class for plugin resolution, fetch and cache failures."""

    #: Whether re-running the same operation later may succeed.
    retryable = False


class GitNotInstalled(PluginError):
    def __init__(self) -> None:
        super().__init__(GIT_INSTALL_HINT)


class CloneFailed(PluginError):
    retryable = True

    def __init__(self, url: str, message: str) -> None:
        self.url = url
        self.message = message.strip()
        super().__init__(f"Failed to clone plugin repository '{url}': {self.message}")


class UpdateFailed(PluginError):
    retryable = True

    def __init__(self, name: str, message: str) -> None:
        self.name = name
        self.message = message.strip()
        super().__init__(f"Failed to update plugin '{name}': {self.message}")


class NotCached(PluginError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Plugin not found in cache: {name}")


class InvalidManifest(PluginError):
    def __init__(self, path: Union[str, Path], message: str) -> None:
        self.path = Path(path)
        self.message = message
        super().__init__(f"Invalid plugin manifest at '{self.path}': {message}")


class UnknownPlugin(PluginError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"Unknown plugin: '{name}'. Use a full Git URL, a configured alias "
            f"or one of the built-in names (see `linthis-plugin list --registry`)"
        )


class NetworkError(PluginError):
    retryable = True

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Network error while fetching plugin: {message}")


class CacheError(PluginError):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Cache directory error: {message}")


class LockError(CacheError):
    """The cache lock could not be acquired; fatal for the whole operation."""


class ConfigNotFound(PluginError):
    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        super().__init__(f"Config file not found in plugin: {self.path}")


class ConfigError(ValueError):
    """An alias table or sync setting could not be read or written."""
