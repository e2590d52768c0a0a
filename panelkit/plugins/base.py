"""
Plugin contract and base classes.

Info        — descriptor record for a plugin, local or from the remote catalog.
Plugin      — abstract contract every extension module implements.
Base        — default implementation of the contract plus rendering helpers.
BasePlugin  — Base wrapping an Info; used for catalog entries that are not
              installed locally.
Plugins     — ordered plugin list with name-based membership.

A plugin is identified by name() everywhere; two plugins with the same
name are the same logical plugin.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime
from typing import Any

from fastapi import Request
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field, field_validator

from panelkit.auth import auth
from panelkit.context import App, HandlerMap
from panelkit.menu import Menu
from panelkit.plugins.render import (
    execute,
    execute_with_custom_menu,
    execute_with_menu,
    render_file_panel,
    resolve_options,
)
from panelkit.services import ServiceList, get_connection
from panelkit.template.types import Buttons, Panel
from panelkit.ui import UIService, get_ui_service

InstallationPageGenerator = Callable[[Request], Any]


class Info(BaseModel):
    """Plugin metadata as shown in the marketplace and returned by get_info()."""

    title: str = ""
    description: str = ""
    version: str = ""
    author: str = ""
    banners: list[str] = Field(default_factory=list)
    url: str = ""
    cover: str = ""
    mini_cover: str = ""
    website: str = ""
    agreement: str = ""
    create_date: datetime | None = None
    update_date: datetime | None = None
    module_path: str = ""
    name: str = ""
    uuid: str = ""
    downloaded: bool = False
    price: list[str] = Field(default_factory=list)
    good_uuids: list[str] = Field(default_factory=list)
    good_num: int = 0
    comment_num: int = 0
    order: int = 0
    features: str = ""
    questions: list[str] = Field(default_factory=list)
    has_bought: bool = False

    @field_validator("banners", "price", "good_uuids", "questions", mode="before")
    @classmethod
    def _null_list(cls, v: Any) -> Any:
        # The catalog server encodes empty slices as null.
        return [] if v is None else v

    def is_free(self) -> bool:
        return len(self.price) == 0


class Plugin(ABC):
    """
    Contract for panel extension modules.

    get_handler() returns the routes the plugin contributes, fully
    populated at call time. init_plugin() runs once per process after
    registration and is where migrations and config registration belong.
    uninstall() and upgrade() raise on failure and return None on success.
    check_update() must bound any network call it makes with a timeout.
    """

    @abstractmethod
    def get_handler(self) -> HandlerMap: ...

    @abstractmethod
    async def init_plugin(self, services: ServiceList) -> None: ...

    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    def prefix(self) -> str: ...

    @abstractmethod
    def get_info(self) -> Info: ...

    @abstractmethod
    def get_index_url(self) -> str: ...

    @abstractmethod
    def get_installation_page(self) -> tuple[bool, InstallationPageGenerator | None]: ...

    @abstractmethod
    def is_installed(self) -> bool: ...

    @abstractmethod
    async def check_update(self) -> tuple[bool, str]: ...

    @abstractmethod
    async def uninstall(self) -> None: ...

    @abstractmethod
    async def upgrade(self) -> None: ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name()!r}>"


class Base(Plugin):
    """
    Default implementation of every Plugin method.

    Subclasses override only what they need. init_base() must run before
    any rendering helper is used; it pulls the connection and UI service
    out of the service list.
    """

    def __init__(self, name: str = "", prefix: str = "", app: App | None = None) -> None:
        self.plug_name = name
        self.url_prefix = prefix
        self.app = app if app is not None else App(prefix)
        self.services: ServiceList | None = None
        self.conn: Any = None
        self.ui: UIService | None = None

    def init_base(self, services: ServiceList) -> None:
        self.services = services
        self.conn = get_connection(services)
        self.ui = get_ui_service(services)

    # ── Contract defaults ─────────────────────────────────────────────────────

    def get_handler(self) -> HandlerMap:
        return self.app.handlers

    async def init_plugin(self, services: ServiceList) -> None:
        return None

    def name(self) -> str:
        return self.plug_name

    def prefix(self) -> str:
        return self.url_prefix

    def get_info(self) -> Info:
        return Info()

    def get_index_url(self) -> str:
        return ""

    def get_installation_page(self) -> tuple[bool, InstallationPageGenerator | None]:
        return True, None

    def is_installed(self) -> bool:
        return False

    async def check_update(self) -> tuple[bool, str]:
        return False, ""

    async def uninstall(self) -> None:
        return None

    async def upgrade(self) -> None:
        return None

    # ── Rendering helpers ─────────────────────────────────────────────────────

    def _nav_buttons(self) -> Buttons:
        return self.ui.nav_buttons

    async def execute_tmpl(self, request: Request, panel: Panel, *options: Any) -> bytes:
        return await execute(request, self.conn, self._nav_buttons(), auth(request), panel, *options)

    async def execute_tmpl_with_nav_buttons(
        self, request: Request, panel: Panel, btns: Buttons, *options: Any
    ) -> bytes:
        return await execute(request, self.conn, btns, auth(request), panel, *options)

    async def execute_tmpl_with_menu(self, request: Request, panel: Panel, *options: Any) -> bytes:
        return await execute_with_menu(
            request, self.conn, self._nav_buttons(), auth(request), panel, self.name(), *options
        )

    async def execute_tmpl_with_custom_menu(self, request: Request, panel: Panel, menu: Menu, *options: Any) -> bytes:
        return await execute_with_custom_menu(request, self._nav_buttons(), auth(request), panel, menu, *options)

    async def execute_tmpl_with_menu_and_nav_buttons(
        self, request: Request, panel: Panel, menu: Menu, btns: Buttons, *options: Any
    ) -> bytes:
        return await execute_with_custom_menu(request, btns, auth(request), panel, menu, *options)

    async def html(self, request: Request, panel: Panel, *options: Any) -> HTMLResponse:
        if resolve_options(options).update_menu:
            buf = await self.execute_tmpl_with_menu(request, panel, *options)
        else:
            buf = await self.execute_tmpl(request, panel, *options)
        return HTMLResponse(content=buf, status_code=200)

    async def html_custom_menu(self, request: Request, panel: Panel, menu: Menu, *options: Any) -> HTMLResponse:
        buf = await self.execute_tmpl_with_custom_menu(request, panel, menu, *options)
        return HTMLResponse(content=buf, status_code=200)

    async def html_menu(self, request: Request, panel: Panel, *options: Any) -> HTMLResponse:
        buf = await self.execute_tmpl_with_menu(request, panel, *options)
        return HTMLResponse(content=buf, status_code=200)

    async def html_btns(self, request: Request, panel: Panel, btns: Buttons, *options: Any) -> HTMLResponse:
        buf = await self.execute_tmpl_with_nav_buttons(request, panel, btns, *options)
        return HTMLResponse(content=buf, status_code=200)

    async def html_menu_with_btns(
        self, request: Request, panel: Panel, menu: Menu, btns: Buttons, *options: Any
    ) -> HTMLResponse:
        buf = await self.execute_tmpl_with_menu_and_nav_buttons(request, panel, menu, btns, *options)
        return HTMLResponse(content=buf, status_code=200)

    async def html_file(self, request: Request, path: str, data: dict[str, Any], *options: Any) -> HTMLResponse:
        """Render a template file as the page panel; failures show a warning panel."""
        result = render_file_panel([path], data)
        return await self.html(request, result.panel, *options)

    async def html_files(
        self, request: Request, data: dict[str, Any], files: list[str], *options: Any
    ) -> HTMLResponse:
        result = render_file_panel(files, data)
        return await self.html(request, result.panel, *options)


class BasePlugin(Base):
    """A Base whose identity and metadata come from an Info record."""

    def __init__(self, info: Info | None = None, prefix: str = "", app: App | None = None) -> None:
        self.info = info or Info()
        super().__init__(name=self.info.name, prefix=prefix, app=app)

    def get_info(self) -> Info:
        return self.info

    def name(self) -> str:
        return self.info.name


class Plugins(list):
    """Ordered plugin collection, unique by name when built through add()."""

    def exist(self, p: Plugin) -> bool:
        return any(v.name() == p.name() for v in self)

    def add(self, p: Plugin) -> Plugins:
        if not self.exist(p):
            self.append(p)
        return self

    def find(self, name: str) -> Plugin | None:
        for v in self:
            if v.name() == name:
                return v
        return None


def new_base_plugin_with_info(info: Info) -> Plugin:
    return BasePlugin(info=info)


def get_plugins_with_infos(infos: list[Info]) -> Plugins:
    return Plugins(new_base_plugin_with_info(i) for i in infos)


def get_handler(app: App) -> HandlerMap:
    """Convenience for plugins implementing get_handler() on their own App."""
    return app.handlers
