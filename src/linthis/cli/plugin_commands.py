#!/usr/bin/env python3
"""
Plugin management commands for the linthis CLI.
"""

import sys
from pathlib import Path

import questionary
from rich.table import Table

from linthis.cli.utils import alias_table, build_loader, console, custom_style, sources_from_args
from linthis.plugin import (
    MANIFEST_FILENAME,
    AliasTable,
    AutoSyncManager,
    ConfigError,
    InvalidManifest,
    PluginCache,
    PluginManifest,
    PluginRegistry,
    PluginSource,
    format_size,
)
from linthis.plugin.auto_sync import load_auto_sync_config


def cmd_plugin_list(args):
    """List configured aliases, built-in registry names or cached plugins."""
    if args.registry:
        table = Table(title="Built-in plugins")
        table.add_column("Name", style="cyan")
        table.add_column("URL", style="green")
        table.add_column("Default ref", style="yellow")
        table.add_column("Description")
        for name, entry in sorted(PluginRegistry().list_all().items()):
            table.add_row(name, entry.url, entry.default_ref or "-", entry.description)
        console.print(table)
        return

    if args.cached:
        _print_cached(PluginCache())
        return

    if args.global_config is None:
        tables = [AliasTable.project(), AliasTable.global_table()]
    else:
        tables = [alias_table(args.global_config)]

    table = Table(title="Configured plugins")
    table.add_column("Alias", style="cyan")
    table.add_column("URL", style="green")
    table.add_column("Ref", style="yellow")
    table.add_column("Scope")
    table.add_column("Status")

    rows = 0
    for alias_tbl in tables:
        for entry in alias_tbl.list_plugins():
            status = "[green]enabled[/]" if entry.enabled else "[red]disabled[/]"
            table.add_row(entry.name, entry.url, entry.ref or "-", alias_tbl.scope, status)
            rows += 1

    if not rows:
        console.print("[dim]No plugins configured[/]")
        return
    console.print(table)


def cmd_plugin_add(args):
    """Add a plugin alias."""
    target = alias_table(args.global_config)
    target.add_plugin(args.alias, args.url, args.ref)
    console.print(f"[green]✅ Added plugin '{args.alias}' to {target.config_path}[/]")


def cmd_plugin_remove(args):
    """Remove a plugin alias."""
    target = alias_table(args.global_config)
    if target.remove_plugin(args.alias):
        console.print(f"[green]✅ Removed plugin '{args.alias}' from {target.config_path}[/]")
    else:
        console.print(f"[yellow]Plugin '{args.alias}' not found in {target.config_path}[/]")


def _print_configs(configs):
    if not configs:
        console.print("[dim]No plugin configs resolved[/]")
        return
    table = Table(title="Plugin configs")
    table.add_column("Language", style="cyan")
    table.add_column("Tool", style="green")
    table.add_column("Plugin", style="yellow")
    table.add_column("Path")
    for config in sorted(configs, key=lambda c: (c.language, c.tool)):
        table.add_row(config.language, config.tool, config.plugin_name, str(config.config_path))
    console.print(table)


def cmd_plugin_load(args):
    """Resolve and fetch plugins, then show the resulting configs."""
    sources = sources_from_args(args.sources, args.ref)
    configs = build_loader().load_configs(sources, force_update=args.force_update)
    _print_configs(configs)


def cmd_plugin_update(args):
    """Update cached plugins from their remotes."""
    sources = sources_from_args(args.sources, args.ref)
    configs = build_loader().load_configs(sources, force_update=True)
    AutoSyncManager().update_last_sync_time()
    _print_configs(configs)


def cmd_plugin_sync(args):
    """Update plugins when the auto-sync interval has elapsed."""
    manager = AutoSyncManager()
    try:
        config = load_auto_sync_config()
    except ConfigError as e:
        console.print(f"[red]❌ {e}[/]")
        return

    if not args.force and not manager.should_sync(config):
        since = manager.time_since_last_sync()
        console.print(f"[dim]Plugins are up to date (last sync {since or 'never'})[/]")
        return

    if config.should_prompt() and not args.yes and not manager.prompt_user():
        return

    configs = build_loader().load_configs(sources_from_args(None), force_update=True)
    manager.update_last_sync_time()
    console.print(f"[green]✅ Synced plugins ({len(configs)} configs)[/]")


def _print_cached(cache: PluginCache):
    plugins = cache.list_cached()
    if not plugins:
        console.print("[dim]No cached plugins[/]")
        return

    table = Table(title=f"Cached plugins ({cache.cache_dir})")
    table.add_column("Name", style="cyan")
    table.add_column("URL", style="green")
    table.add_column("Ref", style="yellow")
    table.add_column("Commit")
    table.add_column("Updated")
    for plugin in plugins:
        table.add_row(
            plugin.name,
            plugin.url or "-",
            plugin.git_ref or "-",
            (plugin.commit_hash or "-")[:12],
            plugin.last_updated.strftime("%Y-%m-%d %H:%M"),
        )
    console.print(table)


def cmd_plugin_cache_info(args):
    """Show cached plugins and total cache size."""
    cache = PluginCache()
    _print_cached(cache)
    console.print(f"Total size: [bold]{format_size(cache.cache_size())}[/]")


def cmd_plugin_clean(args):
    """Remove cached plugins."""
    cache = PluginCache()

    if args.all:
        if not args.yes and not questionary.confirm(
            f"Remove the whole plugin cache at {cache.cache_dir}?",
            default=False,
            style=custom_style,
        ).ask():
            return
        with cache.lock():
            cache.clear_all()
        console.print("[green]✅ Plugin cache cleared[/]")
        return

    if not args.names:
        console.print("[red]❌ Give plugin names or URLs, or use --all[/]")
        sys.exit(1)

    registry = PluginRegistry()
    for name in args.names:
        source = PluginSource.new(name)
        if not source.url:
            alias = AliasTable.project().get_plugin_by_alias(name) or AliasTable.global_table().get_plugin_by_alias(name)
            source = alias.to_source() if alias else registry.resolve(source)
        with cache.lock(cache.get_cache_path(source)):
            removed = cache.remove(source)
        if removed:
            console.print(f"[green]✅ Removed {source.name} from cache[/]")
        else:
            console.print(f"[dim]{source.name} is not cached[/]")


def cmd_plugin_init(args):
    """Scaffold a new plugin directory with a manifest."""
    target = Path(args.path or args.name)
    manifest_path = target / MANIFEST_FILENAME
    if manifest_path.exists() and not args.force:
        console.print(f"[red]❌ {manifest_path} already exists (use --force to overwrite)[/]")
        sys.exit(1)

    target.mkdir(parents=True, exist_ok=True)
    manifest_path.write_text(PluginManifest.scaffold(args.name).to_toml(), encoding="utf-8")
    console.print(f"[green]✅ Created {manifest_path}[/]")


def cmd_plugin_check(args):
    """Validate a plugin directory's manifest and config files."""
    root = Path(args.path)
    try:
        manifest = PluginManifest.load(root)
        manifest.validate_files(root)
    except InvalidManifest as e:
        console.print(f"[red]❌ {e}[/]")
        sys.exit(1)

    count = sum(1 for _ in manifest.iter_configs())
    console.print(
        f"[green]✅ {manifest.plugin.name} {manifest.plugin.version} is valid "
        f"({count} configs, {manifest.dialect.value} layout)[/]"
    )
