"""
Plugin manifest (``linthis-plugin.toml``) parsing and validation.

Two layouts are accepted and normalized to the same ``configs`` mapping of
``language -> tool -> relative path``:

Flat::

    [configs.rust]
    clippy = "rust/clippy.toml"

Extended::

    ["language.rust".tools.clippy]
    files = ["clippy.toml"]

In the extended layout paths are relative to the language directory and only
the first entry of ``files`` is used as the tool's config path.
"""

import tomllib
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import InvalidManifest

MANIFEST_FILENAME = "linthis-plugin.toml"
EXTENDED_PREFIX = "language."

ConfigMap = Dict[str, Dict[str, str]]


class ManifestDialect(Enum):
    """Textual layout of the ``configs`` part of a manifest."""

    FLAT = "flat"
    EXTENDED = "extended"


@dataclass(frozen=True)
class ToolEntry:
    """One ``(language, tool)`` declaration before normalization."""

    language: str
    tool: str
    files: Tuple[str, ...]

    @property
    def primary_file(self) -> Optional[str]:
        return self.files[0] if self.files else None


class Author(BaseModel):
    """Plugin author."""

    model_config = ConfigDict(frozen=True)

    name: str
    email: Optional[str] = None


class PluginMetadata(BaseModel):
    """The ``[plugin]`` table."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Plugin name")
    version: str = Field(description="Plugin version (semver)")
    description: str = Field(default="", description="Short description")
    linthis_version: Optional[str] = Field(
        default=None, description="Minimum linthis version, e.g. '>=0.2.0'"
    )
    languages: List[str] = Field(default_factory=list, description="Supported languages")
    license: Optional[str] = Field(default=None, description="License identifier")
    authors: List[Author] = Field(default_factory=list, description="Plugin authors")

    @field_validator("authors", mode="before")
    @classmethod
    def authors_accept_plain_names(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [{"name": a} if isinstance(a, str) else a for a in v]
        return v


class PluginManifest(BaseModel):
    """A parsed plugin manifest."""

    model_config = ConfigDict(frozen=True)

    plugin: PluginMetadata
    configs: ConfigMap = Field(default_factory=dict)
    dialect: ManifestDialect = ManifestDialect.FLAT

    @classmethod
    def load(cls, plugin_path: Path) -> "PluginManifest":
        """Load the manifest from a plugin root directory."""
        manifest_path = Path(plugin_path) / MANIFEST_FILENAME
        if not manifest_path.is_file():
            raise InvalidManifest(manifest_path, "Manifest file not found")
        try:
            content = manifest_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise InvalidManifest(manifest_path, f"Cannot read manifest: {e}") from e
        return cls.parse(content, manifest_path)

    @classmethod
    def parse(cls, content: str, path: Union[str, Path] = MANIFEST_FILENAME) -> "PluginManifest":
        """Parse manifest text in either dialect."""
        try:
            data = tomllib.loads(content)
        except tomllib.TOMLDecodeError as e:
            raise InvalidManifest(path, str(e)) from e

        plugin_table = data.get("plugin")
        if not isinstance(plugin_table, dict):
            raise InvalidManifest(path, "Missing [plugin] section")
        try:
            metadata = PluginMetadata.model_validate(plugin_table)
        except ValidationError as e:
            raise InvalidManifest(path, f"Invalid plugin metadata: {e}") from e

        dialect = detect_dialect(data)
        if dialect is ManifestDialect.EXTENDED:
            entries = _read_extended(data, path)
        else:
            entries = _read_flat(data, path)

        return cls(plugin=metadata, configs=normalize(entries, dialect), dialect=dialect)

    def validate_files(self, plugin_path: Path) -> None:
        """Check required metadata and that every referenced file exists.

        A single missing file invalidates the whole manifest.
        """
        manifest_path = Path(plugin_path) / MANIFEST_FILENAME
        if not self.plugin.name.strip():
            raise InvalidManifest(manifest_path, "Plugin name is required")
        if not self.plugin.version.strip():
            raise InvalidManifest(manifest_path, "Plugin version is required")

        for language, tools in self.configs.items():
            for tool, rel_path in tools.items():
                if not (Path(plugin_path) / rel_path).exists():
                    raise InvalidManifest(
                        manifest_path,
                        f"Config file not found: {rel_path} (for {language}/{tool})",
                    )

    def get_config_path(self, language: str, tool: str) -> Optional[str]:
        return self.configs.get(language, {}).get(tool)

    def get_language_configs(self, language: str) -> Optional[Dict[str, str]]:
        return self.configs.get(language)

    def supports_language(self, language: str) -> bool:
        return language in self.configs

    def iter_configs(self):
        """Yield ``(language, tool, relative_path)`` triples."""
        for language, tools in self.configs.items():
            for tool, rel_path in tools.items():
                yield language, tool, rel_path

    @classmethod
    def scaffold(cls, name: str) -> "PluginManifest":
        """A minimal manifest for ``linthis-plugin init``."""
        return cls(
            plugin=PluginMetadata(
                name=name,
                version="0.1.0",
                description=f"{name} configuration plugin for linthis",
                linthis_version=">=0.2.0",
                languages=["rust", "python", "typescript"],
                license="MIT",
                authors=[Author(name="Your Name", email="you@example.com")],
            )
        )

    def to_toml(self) -> str:
        """Serialize in the flat dialect."""
        data: Dict[str, Any] = {
            "plugin": self.plugin.model_dump(exclude_none=True),
        }
        if self.configs:
            data["configs"] = {lang: dict(tools) for lang, tools in self.configs.items()}
        return tomli_w.dumps(data)


def validate(manifest: PluginManifest, plugin_path: Path) -> None:
    """Module-level alias of :meth:`PluginManifest.validate_files`."""
    manifest.validate_files(plugin_path)


def detect_dialect(data: Dict[str, Any]) -> ManifestDialect:
    """A non-empty ``[configs]`` table wins; otherwise any ``language.*`` key
    selects the extended layout."""
    configs = data.get("configs")
    if isinstance(configs, dict) and configs:
        return ManifestDialect.FLAT
    if any(key.startswith(EXTENDED_PREFIX) for key in data):
        return ManifestDialect.EXTENDED
    return ManifestDialect.FLAT


def _read_flat(data: Dict[str, Any], path: Union[str, Path]) -> List[ToolEntry]:
    configs = data.get("configs", {})
    if not isinstance(configs, dict):
        raise InvalidManifest(path, "[configs] must be a table")

    entries: List[ToolEntry] = []
    for language, tools in configs.items():
        if not isinstance(tools, dict):
            raise InvalidManifest(path, f"[configs.{language}] must be a table")
        for tool, rel_path in tools.items():
            if not isinstance(rel_path, str):
                raise InvalidManifest(path, f"configs.{language}.{tool} must be a string path")
            entries.append(ToolEntry(language, tool, (rel_path,)))
    return entries


def _read_extended(data: Dict[str, Any], path: Union[str, Path]) -> List[ToolEntry]:
    entries: List[ToolEntry] = []
    for key, section in data.items():
        if not key.startswith(EXTENDED_PREFIX):
            continue
        language = key[len(EXTENDED_PREFIX):]
        tools = section.get("tools") if isinstance(section, dict) else None
        if not isinstance(tools, dict):
            continue
        for tool, tool_config in tools.items():
            files = tool_config.get("files") if isinstance(tool_config, dict) else None
            if files is None:
                continue
            if not isinstance(files, list) or not all(isinstance(f, str) for f in files):
                raise InvalidManifest(
                    path, f'"{key}".tools.{tool}.files must be an array of strings'
                )
            entries.append(ToolEntry(language, tool, tuple(files)))
    return entries


def normalize(entries: List[ToolEntry], dialect: ManifestDialect) -> ConfigMap:
    """Collapse tool entries into ``language -> tool -> path``."""
    configs: ConfigMap = {}
    for entry in entries:
        primary = entry.primary_file
        if primary is None:
            continue
        if dialect is ManifestDialect.EXTENDED:
            # extra files beyond the first are not applied yet
            primary = f"{entry.language}/{primary}"
        configs.setdefault(entry.language, {})[entry.tool] = primary
    return configs
