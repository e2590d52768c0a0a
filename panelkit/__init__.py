"""panelkit — plugin subsystem for server-rendered admin panels."""

__version__ = "1.0.0"
