"""Plugin source requests."""

import re
from dataclasses import dataclass, replace
from typing import Optional

COMMIT_HASH_RE = re.compile(r"^[0-9a-f]{7,40}$")


def is_git_url(value: str) -> bool:
    """True for ``scheme://...`` and scp-style ``git@host:org/repo`` strings."""
    return "://" in value or value.startswith("git@")


def looks_like_commit_hash(ref: str) -> bool:
    """Abbreviated or full hex commit id (7 to 40 lowercase hex digits)."""
    return bool(COMMIT_HASH_RE.match(ref))


@dataclass(frozen=True)
class PluginSource:
    """A request for one configuration plugin.

    ``name`` is either an alias/registry name or, for URL requests, the
    repository name derived from the URL.
    """

    name: str
    url: Optional[str] = None
    git_ref: Optional[str] = None
    enabled: bool = True

    @classmethod
    def new(cls, name_or_url: str) -> "PluginSource":
        """Build a source from a registry/alias name or a Git URL."""
        name_or_url = name_or_url.strip()
        if is_git_url(name_or_url):
            return cls(name=cls.name_from_url(name_or_url), url=name_or_url)
        return cls(name=name_or_url)

    @staticmethod
    def name_from_url(url: str) -> str:
        """``https://github.com/org/my-plugin.git`` -> ``my-plugin``."""
        trimmed = url.rstrip("/")
        while trimmed.endswith(".git"):
            trimmed = trimmed[: -len(".git")]
        last = re.split(r"[/:]", trimmed)[-1]
        return last or "unknown"

    def with_ref(self, git_ref: str) -> "PluginSource":
        return replace(self, git_ref=git_ref)

    @property
    def display(self) -> str:
        label = self.name if not self.url or self.name == self.url else f"{self.name} ({self.url})"
        return f"{label}@{self.git_ref}" if self.git_ref else label
