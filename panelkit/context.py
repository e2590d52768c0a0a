"""
Routing host shared by plugins.

App keeps a mutable route -> handler map. A plugin reports exactly what
it contributes through get_handler(), and the application mounts that
map under the site prefix at startup.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, NamedTuple

from fastapi import Request


class RoutePath(NamedTuple):
    url: str
    method: str


HandlerMap = dict[RoutePath, Callable[..., Any]]


class App:
    """Route table owner for a single plugin."""

    def __init__(self, prefix: str = "") -> None:
        self.prefix = "/" + prefix.strip("/") if prefix.strip("/") else ""
        self.handlers: HandlerMap = {}

    def add(self, method: str, url: str, handler: Callable[..., Any]) -> None:
        self.handlers[RoutePath(self.prefix + url, method.upper())] = handler

    def get(self, url: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        def decorator(handler: Callable[..., Any]) -> Callable[..., Any]:
            self.add("GET", url, handler)
            return handler

        return decorator

    def post(self, url: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        def decorator(handler: Callable[..., Any]) -> Callable[..., Any]:
            self.add("POST", url, handler)
            return handler

        return decorator


def is_pjax(request: Request) -> bool:
    """Return True for partial (pjax) navigations."""
    return request.headers.get("X-PJAX", "").lower() == "true"
