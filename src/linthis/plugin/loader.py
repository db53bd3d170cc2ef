"""
Plugin loading: resolve sources, fetch them, and collect config file paths.

Sources are processed in order. When two sources provide a config for the same
``(language, tool)``, the later one wins.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import structlog

from .aliases import AliasResolver
from .cache import PluginCache
from .errors import ConfigNotFound, GitNotInstalled, LockError, PluginError
from .fetcher import PluginFetcher
from .manifest import PluginManifest
from .registry import PluginRegistry
from .source import PluginSource

log = structlog.get_logger(__name__)

ConfigKey = Tuple[str, str]


@dataclass(frozen=True)
class LoadedConfig:
    """One resolved config file."""

    plugin_name: str
    language: str
    tool: str
    config_path: Path

    @property
    def key(self) -> ConfigKey:
        return (self.language, self.tool)


class PluginLoader:
    """
    Drives alias/registry resolution, fetching and manifest extraction.

    Usage:
        loader = PluginLoader()
        configs = loader.load_configs([PluginSource.new("official")])
        for config in configs:
            print(config.language, config.tool, config.config_path)
    """

    def __init__(
        self,
        cache: Optional[PluginCache] = None,
        fetcher: Optional[PluginFetcher] = None,
        registry: Optional[PluginRegistry] = None,
        resolver: Optional[AliasResolver] = None,
    ):
        self.cache = cache or PluginCache()
        self.fetcher = fetcher or PluginFetcher()
        self.registry = registry or PluginRegistry()
        self.resolver = resolver if resolver is not None else AliasResolver.default()

    def load_configs(
        self,
        sources: Iterable[PluginSource],
        force_update: bool = False,
    ) -> List[LoadedConfig]:
        """Load configs from every enabled source, later sources overriding earlier.

        A failing source never aborts the batch: it falls back to whatever is
        already cached, or contributes nothing. Only a missing git executable
        and cache lock failures propagate.
        """
        layered: Dict[ConfigKey, LoadedConfig] = {}

        for source in sources:
            if not source.enabled:
                log.debug("plugin_skipped_disabled", plugin=source.name)
                continue

            configs = self._load_source(source, force_update)
            for config in configs or []:
                previous = layered.get(config.key)
                if previous is not None and previous.plugin_name != config.plugin_name:
                    log.debug(
                        "plugin_config_overridden",
                        language=config.language,
                        tool=config.tool,
                        previous=previous.plugin_name,
                        plugin=config.plugin_name,
                    )
                layered[config.key] = config

        return list(layered.values())

    def _load_source(
        self, source: PluginSource, force_update: bool
    ) -> Optional[List[LoadedConfig]]:
        try:
            return self._try_fresh_fetch(source, force_update)
        except (GitNotInstalled, LockError):
            raise
        except PluginError as e:
            log.error("plugin_load_failed", plugin=source.name, error=str(e))

        try:
            configs = self._try_cache_only(source)
        except PluginError as e:
            log.debug("plugin_cache_fallback_unavailable", plugin=source.name, error=str(e))
            return None
        log.warning("plugin_fallback_cache", plugin=source.name, configs=len(configs))
        return configs

    def _try_fresh_fetch(self, source: PluginSource, force_update: bool) -> List[LoadedConfig]:
        """Alias -> registry -> fetch -> manifest -> extraction."""
        resolved = self.registry.resolve(self.resolver.resolve_alias(source))
        cached = self.fetcher.fetch(resolved, self.cache, force_update)
        manifest = PluginManifest.load(cached.cache_path)
        manifest.validate_files(cached.cache_path)
        return self.extract_configs(manifest, cached.cache_path)

    def _try_cache_only(self, source: PluginSource) -> List[LoadedConfig]:
        """Read whatever is on disk; registry resolution only, no network."""
        resolved = self.registry.resolve(source)
        cache_path, manifest = self.cache.load_cached_plugin(resolved)
        manifest.validate_files(cache_path)
        return self.extract_configs(manifest, cache_path)

    def extract_configs(self, manifest: PluginManifest, plugin_path: Path) -> List[LoadedConfig]:
        plugin_path = Path(plugin_path).absolute()
        configs: List[LoadedConfig] = []
        for language, tool, rel_path in manifest.iter_configs():
            config_path = plugin_path / rel_path
            if not config_path.exists():
                raise ConfigNotFound(config_path)
            configs.append(
                LoadedConfig(
                    plugin_name=manifest.plugin.name,
                    language=language,
                    tool=tool,
                    config_path=config_path,
                )
            )
        return configs

    def get_config_path(
        self, sources: Iterable[PluginSource], language: str, tool: str
    ) -> Optional[Path]:
        for config in self.load_configs(sources, force_update=False):
            if config.key == (language, tool):
                return config.config_path
        return None

    def get_config_content(
        self, sources: Iterable[PluginSource], language: str, tool: str
    ) -> Optional[str]:
        config_path = self.get_config_path(sources, language, tool)
        if config_path is None:
            return None
        try:
            return config_path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigNotFound(config_path) from e
