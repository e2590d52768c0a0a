"""
panelkit plugin subsystem

Public API:
    Plugin, Base, BasePlugin, Info, Plugins — the plugin contract and defaults
    PluginRegistry, plugin_registry          — active / all-seen bookkeeping
    RenderOptions                            — page composition flags
    get_all, fetch_catalog                   — remote catalog sync
    load_from_plugin                         — runtime loading from a file
"""

from .base import Base, BasePlugin, Info, Plugin, Plugins, get_handler, get_plugins_with_infos
from .catalog import CatalogQuery, Page, fetch_catalog, get_all
from .loader import load_from_plugin
from .registry import PluginRegistry, add, exist, find_by_name, get, plugin_registry
from .render import RenderOptions, execute, execute_with_custom_menu, execute_with_menu

__all__ = [
    "Base",
    "BasePlugin",
    "CatalogQuery",
    "Info",
    "Page",
    "Plugin",
    "PluginRegistry",
    "Plugins",
    "RenderOptions",
    "add",
    "execute",
    "execute_with_custom_menu",
    "execute_with_menu",
    "exist",
    "fetch_catalog",
    "find_by_name",
    "get",
    "get_all",
    "get_handler",
    "get_plugins_with_infos",
    "load_from_plugin",
    "plugin_registry",
]
