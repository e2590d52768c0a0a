"""
Plugin Loader

Loads plugin implementations from Python source files at runtime and
initialises registered plugins at application startup.

A plugin file must expose a module-level attribute named `plugin` holding
an instance of panelkit.plugins.Plugin. Any failure to produce one is a
deployment error: it is logged and raised as PluginLoadError, and nothing
in this package catches it.
"""

from __future__ import annotations

import importlib.util
import logging
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from panelkit.exceptions import PluginLoadError
from panelkit.plugins.base import Plugin

if TYPE_CHECKING:
    from panelkit.plugins.registry import PluginRegistry
    from panelkit.services import ServiceList

logger = logging.getLogger(__name__)

PLUGIN_SYMBOL = "plugin"
_MODULE_NAMESPACE = "panelkit_plugins"


def _fail(message: str, path: str) -> PluginLoadError:
    logger.error("load_from_plugin failed: %s", message, extra={"path": path})
    return PluginLoadError(message, path=path)


def load_from_plugin(mod: str) -> Plugin:
    """Import the plugin file at mod and return its `plugin` object."""
    path = Path(mod)
    if not path.is_file():
        raise _fail(f"plugin file not found: {mod}", mod)

    module_name = f"{_MODULE_NAMESPACE}.{path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise _fail(f"cannot import plugin file: {mod}", mod)

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        sys.modules.pop(module_name, None)
        raise _fail(f"error while importing {mod}: {exc}", mod) from exc

    sym = getattr(module, PLUGIN_SYMBOL, None)
    if sym is None:
        raise _fail(f"symbol {PLUGIN_SYMBOL!r} not found in {mod}", mod)

    if not isinstance(sym, Plugin):
        raise _fail(f"unexpected type from module symbol: {type(sym).__name__}", mod)

    logger.info("Loaded plugin %s from %s", sym.name(), mod)
    return sym


def load_plugins(paths: Iterable[str], registry: PluginRegistry) -> list[Plugin]:
    """Load every path and add the result to registry."""
    loaded = []
    for mod in paths:
        p = load_from_plugin(mod)
        registry.add(p)
        loaded.append(p)
    return loaded


async def initialize_plugins(registry: PluginRegistry, services: ServiceList) -> None:
    """
    Run init_plugin() once for every active plugin.

    Called from the application startup hook, after all registration
    has happened and before requests are served.
    """
    plugins = registry.get()
    for p in plugins:
        await p.init_plugin(services)
        logger.debug("Plugin initialised: %s", p.name())

    logger.info("Plugin initialisation complete: %d plugins active", len(plugins))
