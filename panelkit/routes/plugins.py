"""
Plugin Administration Routes

GET  /api/v1/plugins/        → active plugins
GET  /api/v1/plugins/online  → remote catalog merged with local state
GET  /api/v1/plugins/{name}  → single plugin by name (active or seen)

Authorization is left to the host application's middleware.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Header, Request
from pydantic import BaseModel

from panelkit.exceptions import PluginNotFoundError
from panelkit.plugins.base import Info, Plugin
from panelkit.plugins.catalog import CatalogQuery, Page, RemoteCatalogClient, fetch_catalog
from panelkit.plugins.registry import PluginRegistry

router = APIRouter(tags=["Plugins"])
logger = logging.getLogger(__name__)


# ── Pydantic schemas ───────────────────────────────────────────────────────────


class PluginResponse(BaseModel):
    name: str
    prefix: str
    index_url: str
    installed: bool
    active: bool
    free: bool
    info: Info


class OnlinePluginsResponse(BaseModel):
    plugins: list[PluginResponse]
    page: Page
    available: bool


# ── Dependencies ───────────────────────────────────────────────────────────────


def get_registry(request: Request) -> PluginRegistry:
    return request.app.state.plugin_registry


def get_catalog_client(request: Request) -> RemoteCatalogClient:
    return request.app.state.catalog_client


# ── Helpers ────────────────────────────────────────────────────────────────────


def _build_response(plugin: Plugin, registry: PluginRegistry) -> PluginResponse:
    info = plugin.get_info()
    return PluginResponse(
        name=plugin.name(),
        prefix=plugin.prefix(),
        index_url=plugin.get_index_url(),
        installed=plugin.is_installed(),
        active=registry.exist(plugin),
        free=info.is_free(),
        info=info,
    )


# ── Routes ─────────────────────────────────────────────────────────────────────


@router.get("/", response_model=list[PluginResponse])
async def list_plugins(registry: PluginRegistry = Depends(get_registry)) -> list[PluginResponse]:
    """List active plugins in registration order."""
    return [_build_response(p, registry) for p in registry.get()]


@router.get("/online", response_model=OnlinePluginsResponse)
async def list_online_plugins(
    query: CatalogQuery = Depends(),
    authorization: str = Header(default=""),
    registry: PluginRegistry = Depends(get_registry),
    client: RemoteCatalogClient = Depends(get_catalog_client),
) -> OnlinePluginsResponse:
    """Marketplace listing; available is False when the catalog could not be reached."""
    result = await fetch_catalog(query, authorization, client=client, registry=registry)
    return OnlinePluginsResponse(
        plugins=[_build_response(p, registry) for p in result.plugins],
        page=result.page,
        available=result.ok,
    )


@router.get("/{name}", response_model=PluginResponse)
async def get_plugin(name: str, registry: PluginRegistry = Depends(get_registry)) -> PluginResponse:
    plugin, found = registry.find_by_name(name)
    if not found:
        raise PluginNotFoundError(name)
    return _build_response(plugin, registry)
