"""
Application factory.

Wires the plugin registry into a FastAPI app: plugins are registered
while the app is built, initialised once in the lifespan startup phase,
and their handler maps are then mounted under the site prefix.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable, Iterable
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request

from panelkit.config import settings
from panelkit.exception_handlers import register_exception_handlers
from panelkit.middleware.logging import StructuredLoggingMiddleware
from panelkit.plugins.base import Plugin
from panelkit.plugins.catalog import RemoteCatalogClient
from panelkit.plugins.loader import initialize_plugins, load_plugins
from panelkit.plugins.registry import PluginRegistry, plugin_registry
from panelkit.routes import plugins as plugin_routes
from panelkit.services import DB_SERVICE, UI_SERVICE, ServiceList, create_connection
from panelkit.ui import UIService

logger = logging.getLogger(__name__)


def default_services() -> ServiceList:
    services = ServiceList()
    services.add(DB_SERVICE, create_connection(settings.database_url))
    services.add(UI_SERVICE, UIService())
    return services


def site_path(url: str) -> str:
    prefix = settings.url_prefix.strip("/")
    return f"/{prefix}{url}" if prefix else url


def owned_by(name: str) -> Callable[[Request], None]:
    """Route dependency recording which plugin serves the request."""

    def tag(request: Request) -> None:
        request.state.plugin = name

    return tag


def mount_plugin(app: FastAPI, plugin: Plugin) -> int:
    """
    Add every handler the plugin reports to app. Returns the route count.

    Each route tags request.state.plugin so access logs and error
    responses can name the owning plugin.
    """
    handlers = plugin.get_handler()
    owner = Depends(owned_by(plugin.name()))
    for route, handler in handlers.items():
        app.add_api_route(site_path(route.url), handler, methods=[route.method], dependencies=[owner])
    logger.info("Mounted %d routes for plugin %s", len(handlers), plugin.name())
    return len(handlers)


def create_app(
    plugins: Iterable[Plugin] = (),
    services: ServiceList | None = None,
    registry: PluginRegistry | None = None,
    catalog_client: RemoteCatalogClient | None = None,
) -> FastAPI:
    """Create the FastAPI application."""
    registry = registry or plugin_registry
    services = services if services is not None else default_services()

    load_plugins(settings.plugin_paths, registry)
    for p in plugins:
        registry.add(p)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Starting up %s...", settings.app_name)
        # init_plugin runs once per process even if the app is started again
        if not app.state.plugins_started:
            await initialize_plugins(registry, services)
            for p in registry.get():
                mount_plugin(app, p)
            app.state.plugins_started = True
        yield
        logger.info("Shutting down %s...", settings.app_name)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.plugin_registry = registry
    app.state.services = services
    app.state.catalog_client = catalog_client or RemoteCatalogClient()
    app.state.plugins_started = False

    app.add_middleware(StructuredLoggingMiddleware)
    register_exception_handlers(app)
    app.include_router(plugin_routes.router, prefix="/api/v1/plugins")

    @app.get("/health", tags=["Root"])
    async def health() -> dict:
        return {"status": "ok", "plugins": len(registry.get())}

    return app
