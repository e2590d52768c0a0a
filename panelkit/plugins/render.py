"""
Page composition for plugin panels.

The execute family wraps a content panel in the active theme's page
shell: it picks the pjax or full template, builds and highlights the
menu, filters navigation buttons for the current principal and renders
the result to bytes.

Render flags can be given as a RenderOptions or as up to three
positional booleans (animation, no_compress, update_menu).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from fastapi import Request
from jinja2 import DictLoader, Environment, TemplateError, select_autoescape
from markupsafe import Markup

from panelkit.auth import UserModel
from panelkit.config import config_snapshot, is_production, settings, url_remove_prefix
from panelkit.context import is_pjax
from panelkit.exceptions import TemplateRenderError
from panelkit.menu import Menu, get_global_menu
from panelkit.template import ExecuteParam, get_theme, warning_panel
from panelkit.template import execute as execute_template
from panelkit.template.types import Buttons, Panel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderOptions:
    animation: bool = True
    no_compress: bool = False
    update_menu: bool = False

    @classmethod
    def from_flags(cls, *flags: bool) -> RenderOptions:
        animation = len(flags) == 0 or bool(flags[0])
        no_compress = len(flags) > 1 and bool(flags[1])
        update_menu = len(flags) > 2 and bool(flags[2])
        return cls(animation=animation, no_compress=no_compress, update_menu=update_menu)


def resolve_options(options: tuple[Any, ...]) -> RenderOptions:
    if len(options) == 1 and isinstance(options[0], RenderOptions):
        return options[0]
    return RenderOptions.from_flags(*options)


def _render(
    request: Request,
    user: UserModel,
    panel: Panel,
    menu: Menu,
    nav_buttons: Buttons,
    opts: RenderOptions,
    update_menu: bool,
) -> bytes:
    pjax = is_pjax(request)
    tmpl, tmpl_name = get_theme(settings.theme).get_template(pjax)
    return execute_template(
        ExecuteParam(
            user=user,
            tmpl=tmpl,
            tmpl_name=tmpl_name,
            panel=panel,
            config=config_snapshot(),
            menu=menu,
            animation=opts.animation,
            buttons=Buttons(nav_buttons).check_permission(user),
            no_compress=opts.no_compress,
            update_menu=update_menu,
            is_pjax=pjax,
        )
    )


async def execute(
    request: Request,
    conn: Any,
    nav_buttons: Buttons,
    user: UserModel,
    panel: Panel,
    *options: Any,
) -> bytes:
    """Render panel inside the page shell with the global menu."""
    opts = resolve_options(options)
    menu = await get_global_menu(user, conn)
    menu.set_active_class(url_remove_prefix(request.url.path))
    return _render(request, user, panel, menu, nav_buttons, opts, opts.update_menu)


async def execute_with_menu(
    request: Request,
    conn: Any,
    nav_buttons: Buttons,
    user: UserModel,
    panel: Panel,
    name: str,
    *options: Any,
) -> bytes:
    """Render panel with the global menu scoped to the plugin called name."""
    opts = resolve_options(options)
    menu = await get_global_menu(user, conn, name)
    menu.set_active_class(url_remove_prefix(request.url.path))
    return _render(request, user, panel, menu, nav_buttons, opts, True)


async def execute_with_custom_menu(
    request: Request,
    nav_buttons: Buttons,
    user: UserModel,
    panel: Panel,
    menu: Menu,
    *options: Any,
) -> bytes:
    """Render panel with a caller-built menu."""
    opts = resolve_options(options)
    return _render(request, user, panel, menu, nav_buttons, opts, True)


@dataclass
class PanelResult:
    """Outcome of rendering plugin template files: a content panel, or a
    warning panel when error is set."""

    panel: Panel
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _render_files(files: list[str], data: dict[str, Any]) -> str:
    if not files:
        raise TemplateRenderError("no template files given")

    sources: dict[str, str] = {}
    try:
        for f in files:
            path = Path(f)
            sources[path.name] = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise TemplateRenderError(f"template: {exc}", files=files) from exc

    env = Environment(loader=DictLoader(sources), autoescape=select_autoescape(["html", "xml"]))
    try:
        templates = [env.get_template(name) for name in sources]
    except TemplateError as exc:
        raise TemplateRenderError(f"template: {exc}", files=files) from exc

    try:
        return templates[0].render(**data)
    except Exception as exc:
        raise TemplateRenderError(f"template: {Path(files[0]).name}: {exc}", files=files) from exc


def render_file_panel(files: list[str], data: dict[str, Any] | None = None) -> PanelResult:
    """
    Render template files into a content panel.

    The first file is the entry point; the others can be included or
    extended by their base name. Any failure yields a warning panel
    instead of an exception.
    """
    try:
        html = _render_files(list(files), data or {})
    except TemplateRenderError as exc:
        logger.warning("Plugin template rendering failed: %s", exc.message, extra={"path": ",".join(files)})
        return PanelResult(panel=warning_panel(exc.message).get_content(is_production()), error=exc.message)
    return PanelResult(panel=Panel(content=Markup(html)))
