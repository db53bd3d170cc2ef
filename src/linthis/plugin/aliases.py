"""
User-defined plugin aliases.

Both the project table (``./.linthis.toml``) and the global table
(``<config dir>/linthis/config.toml``) use the same shape::

    [plugin]
    sources = [
        { name = "company", url = "https://github.com/acme/lint-config.git", ref = "v2" },
        { name = "legacy", url = "git@github.com:acme/old.git", enabled = false },
    ]

Aliases are consulted before the built-in registry, project first, so a user
can shadow or extend the built-in names.
"""

import tomllib
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional

import structlog
import tomli_w
from pydantic import BaseModel, Field, ValidationError, field_validator

from linthis import paths

from .errors import ConfigError
from .source import PluginSource

log = structlog.get_logger(__name__)


class AliasEntry(BaseModel):
    """One ``plugin.sources`` record."""

    name: str = Field(description="Alias used on the command line and in configs")
    url: str = Field(description="Git repository URL")
    ref: Optional[str] = Field(default=None, description="Branch, tag or commit")
    enabled: bool = Field(default=True)

    @field_validator("name", "url")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v.strip()

    def to_source(self) -> PluginSource:
        return PluginSource(name=self.name, url=self.url, git_ref=self.ref, enabled=self.enabled)

    def to_toml(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name, "url": self.url}
        if self.ref:
            data["ref"] = self.ref
        if not self.enabled:
            data["enabled"] = False
        return data


class AliasTable:
    """Reads and edits the ``plugin.sources`` array of one TOML file."""

    def __init__(self, config_path: Path, scope: str = "custom"):
        self.config_path = Path(config_path)
        self.scope = scope

    @classmethod
    def project(cls, project_dir: Optional[Path] = None) -> "AliasTable":
        return cls(paths.project_config_file(project_dir), scope="project")

    @classmethod
    def global_table(cls) -> "AliasTable":
        return cls(paths.global_config_file(), scope="global")

    def __repr__(self) -> str:
        return f"AliasTable(scope={self.scope!r}, path={str(self.config_path)!r})"

    def _read(self) -> Dict[str, Any]:
        if not self.config_path.exists():
            return {}
        try:
            with open(self.config_path, "rb") as f:
                return tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigError(f"Failed to read {self.config_path}: {e}") from e

    def _write(self, doc: Dict[str, Any]) -> None:
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "wb") as f:
                tomli_w.dump(doc, f)
        except OSError as e:
            raise ConfigError(f"Failed to write {self.config_path}: {e}") from e

    @staticmethod
    def _sources(doc: Dict[str, Any], path: Path, create: bool = False) -> List[Any]:
        plugin = doc.get("plugin")
        if plugin is None:
            if not create:
                return []
            plugin = doc["plugin"] = {}
        if not isinstance(plugin, dict):
            raise ConfigError(f"'plugin' is not a table in {path}")
        sources = plugin.get("sources")
        if sources is None:
            if not create:
                return []
            sources = plugin["sources"] = []
        if not isinstance(sources, list):
            raise ConfigError(f"'plugin.sources' is not an array in {path}")
        return sources

    def list_plugins(self) -> List[AliasEntry]:
        """All well-formed entries, in file order. Malformed records are skipped."""
        entries: List[AliasEntry] = []
        for item in self._sources(self._read(), self.config_path):
            if not isinstance(item, dict):
                continue
            try:
                entries.append(AliasEntry.model_validate(item))
            except ValidationError as e:
                log.debug("alias_entry_skipped", path=str(self.config_path), error=str(e))
        return entries

    def get_plugin_by_alias(self, alias: str) -> Optional[AliasEntry]:
        return next((e for e in self.list_plugins() if e.name == alias), None)

    def add_plugin(self, alias: str, url: str, git_ref: Optional[str] = None) -> AliasEntry:
        doc = self._read()
        sources = self._sources(doc, self.config_path, create=True)
        if any(isinstance(item, dict) and item.get("name") == alias for item in sources):
            raise ConfigError(f"Plugin alias '{alias}' already exists in {self.config_path}")

        try:
            entry = AliasEntry(name=alias, url=url, ref=git_ref)
        except ValidationError as e:
            raise ConfigError(f"Invalid plugin alias '{alias}': {e}") from e
        sources.append(entry.to_toml())
        self._write(doc)
        log.info("alias_added", alias=alias, url=url, scope=self.scope)
        return entry

    def remove_plugin(self, alias: str) -> bool:
        doc = self._read()
        sources = self._sources(doc, self.config_path)
        kept = [item for item in sources if not (isinstance(item, dict) and item.get("name") == alias)]
        if len(kept) == len(sources):
            return False
        doc["plugin"]["sources"] = kept
        self._write(doc)
        log.info("alias_removed", alias=alias, scope=self.scope)
        return True

    def to_sources(self) -> List[PluginSource]:
        return [entry.to_source() for entry in self.list_plugins()]


class AliasResolver:
    """Resolves alias names to URLs: project table first, then global."""

    def __init__(
        self,
        project: Optional[AliasTable] = None,
        global_: Optional[AliasTable] = None,
    ):
        self.tables = [t for t in (project, global_) if t is not None]

    @classmethod
    def default(cls, project_dir: Optional[Path] = None) -> "AliasResolver":
        return cls(AliasTable.project(project_dir), AliasTable.global_table())

    def resolve_alias(self, source: PluginSource) -> PluginSource:
        """Return ``source`` with URL/ref filled from the first matching alias.

        The request's own ref, when set, wins over the alias table's ref. An
        unmatched source is returned unchanged for the registry to try.
        """
        if source.url:
            return source

        for table in self.tables:
            try:
                entry = table.get_plugin_by_alias(source.name)
            except ConfigError as e:
                log.warning("alias_table_unreadable", scope=table.scope, error=str(e))
                continue
            if entry is not None:
                log.debug("alias_resolved", alias=source.name, scope=table.scope, url=entry.url)
                return replace(source, url=entry.url, git_ref=source.git_ref or entry.ref)

        return source

    def configured_sources(self) -> List[PluginSource]:
        """Sources from every table, lowest precedence first.

        Global entries come before project entries so that, under layering,
        project plugins override global ones.
        """
        sources: List[PluginSource] = []
        for table in reversed(self.tables):
            try:
                sources.extend(table.to_sources())
            except ConfigError as e:
                log.warning("alias_table_unreadable", scope=table.scope, error=str(e))
        return sources
