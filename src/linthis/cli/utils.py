#!/usr/bin/env python3
"""
Shared utilities for the linthis plugin CLI.
"""

from typing import List, Optional

from questionary import Style
from rich.console import Console

from linthis.plugin import AliasResolver, AliasTable, PluginLoader, PluginSource

# Custom questionary style
custom_style = Style(
    [
        ("qmark", "fg:cyan bold"),
        ("question", "bold"),
        ("answer", "fg:green"),
        ("pointer", "fg:cyan bold"),
        ("highlighted", "fg:cyan bold"),
        ("selected", "fg:green"),
        ("separator", "fg:gray"),
        ("instruction", "fg:gray italic"),
    ]
)

console = Console()


def alias_table(use_global: bool) -> AliasTable:
    return AliasTable.global_table() if use_global else AliasTable.project()


def sources_from_args(names: Optional[List[str]], git_ref: Optional[str] = None) -> List[PluginSource]:
    """Turn CLI arguments into sources; no arguments means every configured alias."""
    if not names:
        return AliasResolver.default().configured_sources()
    sources = [PluginSource.new(name) for name in names]
    if git_ref:
        sources = [source.with_ref(git_ref) for source in sources]
    return sources


def build_loader() -> PluginLoader:
    return PluginLoader()
