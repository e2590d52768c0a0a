from .theme import ExecuteParam, JinjaTheme, Theme, add_theme, execute, get_theme
from .types import Button, Buttons, Panel, WarningPanel, warning_panel

__all__ = [
    "Button",
    "Buttons",
    "ExecuteParam",
    "JinjaTheme",
    "Panel",
    "Theme",
    "WarningPanel",
    "add_theme",
    "execute",
    "get_theme",
    "warning_panel",
]
