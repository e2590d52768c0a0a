"""
Plugin Registry

PluginRegistry keeps two ordered, name-unique plugin lists:

    active   — plugins wired into the running application.
    all-seen — every plugin observed locally or through a remote catalog
               query; it only grows for the lifetime of the process.

Registration into the active list is expected to happen during startup,
before requests are served. The all-seen list is also written by catalog
syncs running inside request handlers, so its mutation is serialised.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable

from panelkit.plugins.base import Plugin, Plugins

logger = logging.getLogger(__name__)


class PluginRegistry:
    """Owns the active and all-seen plugin lists."""

    def __init__(self) -> None:
        self._plugins = Plugins()
        self._all_plugins = Plugins()
        self._seen_lock = threading.Lock()

    # ── Registration ──────────────────────────────────────────────────────────

    def add(self, plugin: Plugin) -> None:
        """Add plugin to the active list unless a same-named one is there."""
        if self._plugins.exist(plugin):
            logger.debug("Plugin already registered, ignoring: %s", plugin.name())
            return
        self._plugins.add(plugin)
        self.merge_seen([plugin])
        logger.info("Plugin registered: %s", plugin.name())

    def merge_seen(self, plugins: Iterable[Plugin]) -> int:
        """Append every plugin whose name is not yet seen. Returns how many were added."""
        added = 0
        with self._seen_lock:
            for p in plugins:
                if not self._all_plugins.exist(p):
                    self._all_plugins.append(p)
                    added += 1
        return added

    # ── Lookup ────────────────────────────────────────────────────────────────

    def exist(self, plugin: Plugin) -> bool:
        return self._plugins.exist(plugin)

    def get(self) -> Plugins:
        """Snapshot of the active list in registration order."""
        return Plugins(self._plugins)

    def find_active(self, name: str) -> Plugin | None:
        return self._plugins.find(name)

    def find_by_name(self, name: str) -> tuple[Plugin | None, bool]:
        """Look name up in the all-seen list."""
        with self._seen_lock:
            plugin = self._all_plugins.find(name)
        return plugin, plugin is not None

    def all_seen(self) -> Plugins:
        with self._seen_lock:
            return Plugins(self._all_plugins)


# ── Global singleton ──────────────────────────────────────────────────────────
plugin_registry = PluginRegistry()


def add(plugin: Plugin) -> None:
    plugin_registry.add(plugin)


def exist(plugin: Plugin) -> bool:
    return plugin_registry.exist(plugin)


def get() -> Plugins:
    return plugin_registry.get()


def find_by_name(name: str) -> tuple[Plugin | None, bool]:
    return plugin_registry.find_by_name(name)
