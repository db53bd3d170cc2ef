#!/usr/bin/env python3
"""
Argument parsers for the linthis plugin CLI.
"""

import argparse
import sys

from linthis import __version__
from linthis.cli.utils import console
from linthis.logging import configure_logging, level_for_verbosity
from linthis.plugin import ConfigError, GitNotInstalled, PluginError

from linthis.cli.plugin_commands import *


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linthis-plugin", description="Manage linthis configuration plugins"
    )
    parser.add_argument("--version", action="version", version=f"linthis-plugin {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log plugin operations")
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # List command
    list_parser = subparsers.add_parser("list", aliases=["ls"], help="List plugins")
    list_parser.add_argument("--registry", action="store_true", help="Show built-in plugins")
    list_parser.add_argument("--cached", action="store_true", help="Show cached plugins")
    scope = list_parser.add_mutually_exclusive_group()
    scope.add_argument(
        "-g", "--global", dest="global_config", action="store_const", const=True,
        help="Only the global config",
    )
    scope.add_argument(
        "-p", "--project", dest="global_config", action="store_const", const=False,
        help="Only the project config",
    )
    list_parser.set_defaults(func=cmd_plugin_list, global_config=None)

    # Add command
    add_parser = subparsers.add_parser("add", help="Add a plugin alias")
    add_parser.add_argument("alias", help="Short name for the plugin")
    add_parser.add_argument("url", help="Git repository URL")
    add_parser.add_argument("--ref", help="Branch, tag or commit to pin")
    add_parser.add_argument(
        "-g", "--global", dest="global_config", action="store_true",
        help="Write to the global config instead of .linthis.toml",
    )
    add_parser.set_defaults(func=cmd_plugin_add)

    # Remove command
    remove_parser = subparsers.add_parser("remove", aliases=["rm"], help="Remove a plugin alias")
    remove_parser.add_argument("alias", help="Alias to remove")
    remove_parser.add_argument(
        "-g", "--global", dest="global_config", action="store_true",
        help="Edit the global config instead of .linthis.toml",
    )
    remove_parser.set_defaults(func=cmd_plugin_remove)

    # Load command
    load_parser = subparsers.add_parser("load", help="Resolve plugins and show their configs")
    load_parser.add_argument(
        "sources", nargs="*", help="Aliases, registry names or Git URLs (default: configured)"
    )
    load_parser.add_argument("--ref", help="Branch, tag or commit for the given sources")
    load_parser.add_argument(
        "--force-update", action="store_true", help="Fetch even if already cached"
    )
    load_parser.set_defaults(func=cmd_plugin_load)

    # Update command
    update_parser = subparsers.add_parser("update", help="Update cached plugins")
    update_parser.add_argument("sources", nargs="*", help="Plugins to update (default: configured)")
    update_parser.add_argument("--ref", help="Branch, tag or commit for the given sources")
    update_parser.set_defaults(func=cmd_plugin_update)

    # Sync command
    sync_parser = subparsers.add_parser("sync", help="Update plugins if the sync interval elapsed")
    sync_parser.add_argument("--force", "-f", action="store_true", help="Ignore the interval")
    sync_parser.add_argument("-y", "--yes", action="store_true", help="Don't prompt")
    sync_parser.set_defaults(func=cmd_plugin_sync)

    # Clean command
    clean_parser = subparsers.add_parser("clean", help="Remove plugins from the cache")
    clean_parser.add_argument("names", nargs="*", help="Plugins to remove")
    clean_parser.add_argument("--all", action="store_true", help="Remove the whole cache")
    clean_parser.add_argument("-y", "--yes", action="store_true", help="Skip confirmation")
    clean_parser.set_defaults(func=cmd_plugin_clean)

    # Cache info command
    info_parser = subparsers.add_parser("cache-info", help="Show cache contents and size")
    info_parser.set_defaults(func=cmd_plugin_cache_info)

    # Init command
    init_parser = subparsers.add_parser("init", help="Scaffold a new config plugin")
    init_parser.add_argument("name", help="Plugin name")
    init_parser.add_argument("path", nargs="?", default=None, help="Target directory (default: name)")
    init_parser.add_argument("--force", "-f", action="store_true", help="Overwrite existing manifest")
    init_parser.set_defaults(func=cmd_plugin_init)

    # Check command
    check_parser = subparsers.add_parser("check", help="Validate a plugin directory")
    check_parser.add_argument("path", nargs="?", default=".", help="Plugin directory")
    check_parser.set_defaults(func=cmd_plugin_check)

    return parser


def main(argv=None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(level=level_for_verbosity(args.verbose), json_output=args.json_logs)

    if not hasattr(args, "func"):
        parser.print_help()
        return

    try:
        args.func(args)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/]")
        sys.exit(1)
    except GitNotInstalled as e:
        console.print(f"[red]{e}[/]")
        sys.exit(2)
    except (PluginError, ConfigError) as e:
        console.print(f"[red]Error: {e}[/]")
        sys.exit(1)
