"""
linthis plugins - shareable linter and formatter configuration from Git.

Resolve a plugin by alias, registry name or URL, keep a local cache of it and
hand back the config files it provides for each language and tool.
"""

__version__ = "0.3.0"
__author__ = "linthis Team"

from linthis.plugin import LoadedConfig, PluginLoader, PluginSource

__all__ = ["LoadedConfig", "PluginLoader", "PluginSource", "__version__"]
