"""
Remote plugin catalog.

RemoteCatalogClient fetches the marketplace listing; get_all() reconciles
it with the local registry so that installed plugins come back as their
live instances and every catalog entry ends up in the all-seen list.

Catalog failures never surface to get_all() callers: an empty result
means "try again later", not "no plugins exist". fetch_catalog() returns
the same data together with the failure reason.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from panelkit.config import settings
from panelkit.exceptions import RemoteCatalogError
from panelkit.plugins.base import Info, Plugins, get_plugins_with_infos
from panelkit.plugins.registry import PluginRegistry, plugin_registry

logger = logging.getLogger(__name__)

CATALOG_LIST_PATH = "/api/v1/plugin/list"


# ── Wire models ───────────────────────────────────────────────────────────────


class Page(BaseModel):
    """Pagination chrome served alongside a catalog page."""

    css: str = ""
    html: str = ""
    js: str = ""


class GetOnlineResData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    items: list[Info] = Field(default_factory=list, alias="list")
    count: int = 0
    has_more: bool = False
    page: Page = Field(default_factory=Page)

    @field_validator("items", mode="before")
    @classmethod
    def _null_list(cls, v: object) -> object:
        return [] if v is None else v


class GetOnlineRes(BaseModel):
    code: int
    msg: str = ""
    data: GetOnlineResData = Field(default_factory=GetOnlineResData)


class CatalogQuery(BaseModel):
    page: str = "1"
    free: str = ""
    page_size: str = "20"
    filter: str = ""
    order: str = ""
    lang: str = ""
    category: str = ""
    version: str = ""


# ── Transport ─────────────────────────────────────────────────────────────────


class RemoteCatalogClient:
    """HTTP client for the remote catalog."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.catalog_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.catalog_timeout
        self.transport = transport

    async def get_online(self, query: CatalogQuery, token: str) -> bytes:
        """Return the raw catalog response body for query."""
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = token
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.get(
                    CATALOG_LIST_PATH,
                    params=query.model_dump(),
                    headers=headers,
                )
                response.raise_for_status()
        except httpx.TimeoutException as e:
            raise RemoteCatalogError(f"catalog request timed out after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise RemoteCatalogError(f"catalog responded with HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise RemoteCatalogError(f"catalog request failed: {e}") from e
        return response.content


# ── Sync ──────────────────────────────────────────────────────────────────────


@dataclass
class CatalogResult:
    plugins: Plugins = field(default_factory=Plugins)
    page: Page = field(default_factory=Page)
    error: RemoteCatalogError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def parse_catalog(raw: bytes) -> GetOnlineRes:
    try:
        data = GetOnlineRes.model_validate_json(raw)
    except ValidationError as e:
        raise RemoteCatalogError(f"malformed catalog response: {e}", kind=RemoteCatalogError.DECODE) from e
    if data.code != 0:
        raise RemoteCatalogError(
            f"catalog returned code {data.code}: {data.msg}", kind=RemoteCatalogError.STATUS, code=data.code
        )
    return data


async def fetch_catalog(
    query: CatalogQuery,
    token: str,
    client: RemoteCatalogClient | None = None,
    registry: PluginRegistry | None = None,
) -> CatalogResult:
    """Fetch the catalog and merge it with registry. See module docstring."""
    client = client or RemoteCatalogClient()
    registry = registry or plugin_registry

    try:
        data = parse_catalog(await client.get_online(query, token))
    except RemoteCatalogError as e:
        logger.warning("Remote catalog unavailable (%s): %s", e.kind, e.message)
        return CatalogResult(error=e)

    plugs = get_plugins_with_infos(data.data.items)
    for index, p in enumerate(plugs):
        active = registry.find_active(p.name())
        if active is not None:
            plugs[index] = active

    added = registry.merge_seen(plugs)
    logger.info("Remote catalog returned %d plugins (%d newly seen)", len(plugs), added)
    return CatalogResult(plugins=plugs, page=data.data.page)


async def get_all(
    query: CatalogQuery,
    token: str,
    client: RemoteCatalogClient | None = None,
    registry: PluginRegistry | None = None,
) -> tuple[Plugins, Page]:
    result = await fetch_catalog(query, token, client=client, registry=registry)
    return result.plugins, result.page
