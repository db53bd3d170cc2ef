"""
linthis configuration plugins.

Fetches configuration plugins from Git repositories, caches them locally for
offline use, and resolves the config files they provide per language and tool.
"""
from linthis.plugin.aliases import AliasEntry, AliasResolver, AliasTable
from linthis.plugin.auto_sync import AutoSyncConfig, AutoSyncManager
from linthis.plugin.cache import CachedPlugin, PluginCache, format_size
from linthis.plugin.errors import (
    CacheError,
    CloneFailed,
    ConfigError,
    ConfigNotFound,
    GitNotInstalled,
    InvalidManifest,
    LockError,
    NetworkError,
    NotCached,
    PluginError,
    UnknownPlugin,
    UpdateFailed,
)
from linthis.plugin.fetcher import PluginFetcher
from linthis.plugin.loader import LoadedConfig, PluginLoader
from linthis.plugin.manifest import MANIFEST_FILENAME, ManifestDialect, PluginManifest
from linthis.plugin.registry import PluginRegistry, RegistryEntry
from linthis.plugin.source import PluginSource

__all__ = [
    "AliasEntry",
    "AliasResolver",
    "AliasTable",
    "AutoSyncConfig",
    "AutoSyncManager",
    "CacheError",
    "CachedPlugin",
    "CloneFailed",
    "ConfigError",
    "ConfigNotFound",
    "GitNotInstalled",
    "InvalidManifest",
    "LoadedConfig",
    "LockError",
    "MANIFEST_FILENAME",
    "ManifestDialect",
    "NetworkError",
    "NotCached",
    "PluginCache",
    "PluginError",
    "PluginFetcher",
    "PluginLoader",
    "PluginManifest",
    "PluginRegistry",
    "PluginSource",
    "RegistryEntry",
    "UnknownPlugin",
    "UpdateFailed",
    "format_size",
]
