"""
Navigation menu model and the pluggable builder used to produce it.

Menu trees are owned by whatever storage the host application uses; this
module only defines the shape handed to templates and the highlighting
applied for the current request.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from pydantic import BaseModel, Field

from panelkit.auth import UserModel

logger = logging.getLogger(__name__)

ACTIVE_CLASS = "active"


class MenuItem(BaseModel):
    id: int = 0
    title: str
    url: str = ""
    icon: str = ""
    header: str = ""
    plugin_name: str = ""
    active: str = ""
    children: list[MenuItem] = Field(default_factory=list)


class Menu(BaseModel):
    items: list[MenuItem] = Field(default_factory=list)
    plugin_name: str = ""
    max_order: int = 0

    def set_active_class(self, path: str) -> Menu:
        """Mark the item matching path, and its parent, as active."""
        for item in self.items:
            item.active = ""
            for child in item.children:
                child.active = ""
                if _match(child.url, path):
                    child.active = ACTIVE_CLASS
                    item.active = ACTIVE_CLASS
            if _match(item.url, path):
                item.active = ACTIVE_CLASS
        return self


def _match(url: str, path: str) -> bool:
    if not url:
        return False
    return url.rstrip("/") == path.rstrip("/")


class MenuBuilder(Protocol):
    async def build(self, user: UserModel, conn: Any, plugin_name: str = "") -> Menu: ...


class StaticMenuBuilder:
    """Builds menus from an in-memory item list; items are filtered by
    plugin name when one is given and by the principal's permissions."""

    def __init__(self, items: list[MenuItem] | None = None) -> None:
        self.items = items or []

    async def build(self, user: UserModel, conn: Any, plugin_name: str = "") -> Menu:
        items = []
        for item in self.items:
            if plugin_name and item.plugin_name != plugin_name:
                continue
            if item.url and not user.check_permission(item.url):
                continue
            visible = item.model_copy(deep=True)
            visible.children = [c for c in visible.children if not c.url or user.check_permission(c.url)]
            items.append(visible)
        return Menu(items=items, plugin_name=plugin_name, max_order=len(items))


_builder: MenuBuilder = StaticMenuBuilder()


def set_menu_builder(builder: MenuBuilder) -> None:
    global _builder
    _builder = builder


def get_menu_builder() -> MenuBuilder:
    return _builder


async def get_global_menu(user: UserModel, conn: Any, plugin_name: str = "") -> Menu:
    """Build the menu for user, scoped to plugin_name when given."""
    menu = await _builder.build(user, conn, plugin_name)
    logger.debug("Built menu with %d items (plugin=%s)", len(menu.items), plugin_name or "-")
    return menu
