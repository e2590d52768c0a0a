"""
Value types exchanged between plugins and the page shell.

Panel     — a pre-rendered content fragment plus its page metadata.
Button    — a navigation button in the page header.
Buttons   — ordered button list filtered by the current principal.
WarningPanel — the panel substituted when plugin content cannot be rendered.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from markupsafe import Markup

from panelkit.auth import UserModel

PRODUCTION_WARNING = "Something went wrong while rendering this page. Please contact the administrator."


@dataclass
class Panel:
    content: Markup = field(default_factory=Markup)
    title: str = ""
    description: str = ""
    css: Markup = field(default_factory=Markup)
    js: Markup = field(default_factory=Markup)
    callbacks: list[str] = field(default_factory=list)
    auto_refresh: bool = False
    refresh_interval: list[int] = field(default_factory=list)


@dataclass
class Button:
    title: str
    url: str = ""
    method: str = "GET"
    icon: str = ""
    target: str = ""

    def visible_to(self, user: UserModel) -> bool:
        if not self.url:
            return True
        return user.check_permission(self.url, self.method)


class Buttons(list):
    def check_permission(self, user: UserModel) -> Buttons:
        """Return the buttons the user may see, preserving order."""
        return Buttons(b for b in self if b.visible_to(user))


@dataclass
class WarningPanel:
    message: str
    title: str = "Warning"

    def get_content(self, production: bool = False) -> Panel:
        message = PRODUCTION_WARNING if production else self.message
        content = Markup('<div class="alert alert-warning"><h4>{}</h4><p>{}</p></div>').format(
            self.title, message
        )
        return Panel(content=content, title=self.title, description=message)


def warning_panel(message: str) -> WarningPanel:
    return WarningPanel(message=message)
