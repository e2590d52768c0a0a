"""
Theme registry and page shell execution.

A theme owns two Jinja2 templates: the full page layout and the pjax
fragment used for partial navigations. execute() renders whichever one
the caller picked with the composed parameter bundle.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from jinja2 import Environment, FileSystemLoader, Template, select_autoescape

from panelkit.auth import UserModel
from panelkit.menu import Menu
from panelkit.template.types import Buttons, Panel

logger = logging.getLogger(__name__)

DEFAULT_THEME = "default"
LAYOUT_TEMPLATE = "layout"
PJAX_TEMPLATE = "pjax"

_TEMPLATE_ROOT = Path(__file__).parent / "templates"
_BETWEEN_TAGS = re.compile(r">\s+<")


class Theme(Protocol):
    def get_template(self, is_pjax: bool) -> tuple[Template, str]: ...


class JinjaTheme:
    """Theme backed by a directory holding layout.html and pjax.html."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)
        self.env = Environment(
            loader=FileSystemLoader(str(self.directory)),
            autoescape=select_autoescape(["html", "xml"]),
        )

    def get_template(self, is_pjax: bool) -> tuple[Template, str]:
        name = PJAX_TEMPLATE if is_pjax else LAYOUT_TEMPLATE
        return self.env.get_template(f"{name}.html"), name


_themes: dict[str, Theme] = {DEFAULT_THEME: JinjaTheme(_TEMPLATE_ROOT / DEFAULT_THEME)}


def add_theme(name: str, theme: Theme) -> None:
    _themes[name] = theme
    logger.info("Theme registered: %s", name)


def get_theme(name: str) -> Theme:
    theme = _themes.get(name)
    if theme is None:
        logger.warning("Unknown theme %s, falling back to %s", name, DEFAULT_THEME)
        return _themes[DEFAULT_THEME]
    return theme


@dataclass
class ExecuteParam:
    user: UserModel
    tmpl: Template
    tmpl_name: str
    panel: Panel
    config: dict[str, Any] = field(default_factory=dict)
    menu: Menu | None = None
    animation: bool = True
    buttons: Buttons = field(default_factory=Buttons)
    no_compress: bool = False
    update_menu: bool = False
    is_pjax: bool = False


def compress(html: str) -> str:
    """Drop the whitespace between tags."""
    return _BETWEEN_TAGS.sub("><", html).strip()


def execute(param: ExecuteParam) -> bytes:
    """Render the page shell around param.panel."""
    html = param.tmpl.render(
        user=param.user,
        tmpl_name=param.tmpl_name,
        panel=param.panel,
        config=param.config,
        menu=param.menu,
        animation=param.animation,
        buttons=param.buttons,
        no_compress=param.no_compress,
        update_menu=param.update_menu,
        is_pjax=param.is_pjax,
    )
    if not param.no_compress:
        html = compress(html)
    return html.encode("utf-8")
