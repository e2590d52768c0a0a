"""
Service locator handed to plugins at boot.

Well-known entries: "db" (database connection handle) and "ui"
(UIService holding the default navigation buttons).
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

logger = logging.getLogger(__name__)

DB_SERVICE = "db"
UI_SERVICE = "ui"


class ServiceList(dict):
    """Named services available to plugins."""

    def add(self, name: str, service: Any) -> None:
        self[name] = service

    def get_service(self, name: str) -> Any:
        try:
            return self[name]
        except KeyError:
            raise KeyError(f"service not registered: {name}") from None


def create_connection(database_url: str) -> AsyncEngine:
    """Create the async engine plugins receive as their connection handle."""
    logger.info("Creating database engine for %s", database_url.split("@")[-1])
    return create_async_engine(database_url, pool_pre_ping=True)


def get_connection(services: ServiceList) -> Any:
    return services.get_service(DB_SERVICE)
