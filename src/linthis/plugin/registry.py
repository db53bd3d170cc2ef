"""Built-in plugin registry: short names for well-known plugin repositories."""

from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from .errors import UnknownPlugin
from .source import PluginSource


@dataclass(frozen=True)
class RegistryEntry:
    """A known plugin repository."""

    url: str
    description: str
    default_ref: Optional[str] = None


BUILTIN_REGISTRY: Mapping[str, RegistryEntry] = MappingProxyType(
    {
        "official": RegistryEntry(
            url="https://github.com/zhlinh/linthis-config.git",
            description="Official linthis configuration with community best practices",
            default_ref="main",
        ),
    }
)


class PluginRegistry:
    """Name -> :class:`RegistryEntry` lookup."""

    def __init__(self, entries: Optional[Mapping[str, RegistryEntry]] = None):
        self._entries: Dict[str, RegistryEntry] = dict(
            BUILTIN_REGISTRY if entries is None else entries
        )

    def resolve(self, source: PluginSource) -> PluginSource:
        """Fill in URL (and default ref) for a registry name.

        A source that already carries a URL is returned unchanged.
        """
        if source.url:
            return source

        entry = self._entries.get(source.name)
        if entry is None:
            raise UnknownPlugin(source.name)
        return replace(source, url=entry.url, git_ref=source.git_ref or entry.default_ref)

    def contains(self, name: str) -> bool:
        return name in self._entries

    def get(self, name: str) -> Optional[RegistryEntry]:
        return self._entries.get(name)

    def list_names(self) -> List[str]:
        return sorted(self._entries)

    def list_all(self) -> Mapping[str, RegistryEntry]:
        return MappingProxyType(self._entries)
