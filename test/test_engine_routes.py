"""
Application wiring and plugin administration route tests

Apps are built with an isolated registry, a sentinel DB handle and a
mocked catalog transport; TestClient is used as a context manager so the
lifespan startup (plugin init + mounting) runs.
"""

from __future__ import annotations

import json
import logging

import httpx
import pytest
from fastapi.testclient import TestClient
from utils.plugins import ExamplePlugin

from panelkit.engine import create_app, mount_plugin, site_path
from panelkit.plugins.catalog import RemoteCatalogClient

CATALOG_BODY = {
    "code": 0,
    "msg": "",
    "data": {
        "list": [{"name": "example", "title": "Example"}, {"name": "chart", "title": "Charts", "price": ["5"]}],
        "count": 2,
        "has_more": True,
        "page": {"css": "", "html": "<nav>1 2</nav>", "js": ""},
    },
}


def _catalog_client(body=None, fail=False) -> RemoteCatalogClient:
    def handler(request: httpx.Request) -> httpx.Response:
        if fail:
            raise httpx.ConnectError("down", request=request)
        return httpx.Response(200, content=json.dumps(body or CATALOG_BODY).encode())

    return RemoteCatalogClient(base_url="http://catalog.test", transport=httpx.MockTransport(handler))


@pytest.fixture
def plugin() -> ExamplePlugin:
    return ExamplePlugin()


@pytest.fixture
def app(plugin, services, registry):
    return create_app(plugins=[plugin], services=services, registry=registry, catalog_client=_catalog_client())


class TestCreateApp:
    def test_plugins_registered_at_build_time(self, app, registry, plugin):
        assert registry.get() == [plugin]

    def test_duplicate_names_registered_once(self, services, registry):
        first, second = ExamplePlugin(), ExamplePlugin()
        create_app(plugins=[first, second], services=services, registry=registry, catalog_client=_catalog_client())
        assert registry.get() == [first]

    def test_init_plugin_runs_once_on_startup(self, app, plugin):
        assert plugin.init_count == 0
        with TestClient(app):
            pass
        assert plugin.init_count == 1

    def test_restarting_app_does_not_reinitialise(self, app, plugin):
        with TestClient(app):
            pass
        with TestClient(app) as client:
            assert client.get("/admin/example/info").status_code == 200
        assert plugin.init_count == 1
        paths = [getattr(r, "path", None) for r in app.routes]
        assert paths.count("/admin/example/info") == 1

    def test_plugin_routes_mounted_under_site_prefix(self, app):
        with TestClient(app):
            paths = [getattr(r, "path", None) for r in app.routes]
        assert site_path("/example/info") in paths
        assert "/admin/example/info" in paths

    def test_plugin_page_renders(self, app, menu_builder):
        with TestClient(app) as client:
            response = client.get("/admin/example/info")
        assert response.status_code == 200
        assert "example info" in response.text
        assert response.headers["content-type"].startswith("text/html")

    def test_plugin_page_pjax(self, app):
        with TestClient(app) as client:
            response = client.get("/admin/example/info", headers={"X-PJAX": "true"})
        assert response.status_code == 200
        assert "<!DOCTYPE html>" not in response.text

    def test_broken_template_page_is_warning_not_error(self, app):
        with TestClient(app) as client:
            response = client.get("/admin/example/broken")
        assert response.status_code == 200
        assert "alert-warning" in response.text

    def test_request_id_header(self, app):
        with TestClient(app) as client:
            response = client.get("/health", headers={"X-Request-ID": "abc"})
        assert response.headers["X-Request-ID"] == "abc"
        assert response.json() == {"status": "ok", "plugins": 1}

    def test_access_log_names_owning_plugin(self, app, caplog):
        caplog.set_level(logging.INFO, logger="panelkit.access")
        with TestClient(app) as client:
            client.get("/admin/example/info", headers={"X-PJAX": "true"})
            client.get("/api/v1/plugins/")
        records = {r.path: r for r in caplog.records if r.name == "panelkit.access"}
        page = records["/admin/example/info"]
        assert page.plugin == "example"
        assert page.pjax is True
        assert "[example]" in page.getMessage()
        assert not hasattr(records["/api/v1/plugins/"], "plugin")

    def test_mount_plugin_counts_routes(self, plugin):
        from fastapi import FastAPI

        assert mount_plugin(FastAPI(), plugin) == 2


class TestPluginRoutes:
    def _paths(self, app):
        return [getattr(r, "path", None) for r in app.routes]

    def test_routes_registered(self, app):
        paths = self._paths(app)
        assert "/api/v1/plugins/" in paths
        assert "/api/v1/plugins/online" in paths
        assert "/api/v1/plugins/{name}" in paths

    def test_list_active(self, app):
        with TestClient(app) as client:
            response = client.get("/api/v1/plugins/")
        assert response.status_code == 200
        body = response.json()
        assert [p["name"] for p in body] == ["example"]
        assert body[0]["active"] is True
        assert body[0]["installed"] is True
        assert body[0]["free"] is False
        assert body[0]["index_url"] == "/example/info"

    def test_get_unknown_plugin_404_envelope(self, app):
        with TestClient(app) as client:
            response = client.get("/api/v1/plugins/nope")
        assert response.status_code == 404
        error = response.json()["error"]
        assert error["error_code"] == "PLUGIN_NOT_FOUND"
        assert error["path"] == "/api/v1/plugins/nope"

    def test_error_envelope_carries_request_id(self, app):
        with TestClient(app) as client:
            response = client.get("/api/v1/plugins/nope", headers={"X-Request-ID": "req-42"})
        error = response.json()["error"]
        assert error["request_id"] == "req-42"
        assert error["details"] == {"name": "nope"}
        assert "plugin" not in error

    def test_unknown_route_envelope(self, app):
        with TestClient(app) as client:
            response = client.get("/admin/missing")
        assert response.status_code == 404
        assert response.json()["error"]["error_code"] == "RESOURCE_NOT_FOUND"

    def test_online_merges_with_local(self, app):
        with TestClient(app) as client:
            response = client.get("/api/v1/plugins/online", params={"page": "1"})
            body = response.json()
            assert body["available"] is True
            assert [p["name"] for p in body["plugins"]] == ["example", "chart"]
            assert body["plugins"][0]["active"] is True
            assert body["plugins"][1]["active"] is False
            assert body["page"]["html"] == "<nav>1 2</nav>"

            seen = client.get("/api/v1/plugins/chart")
        assert seen.status_code == 200
        assert seen.json()["info"]["title"] == "Charts"

    def test_online_unavailable(self, services, registry):
        app = create_app(services=services, registry=registry, catalog_client=_catalog_client(fail=True))
        with TestClient(app) as client:
            body = client.get("/api/v1/plugins/online").json()
        assert body == {"plugins": [], "page": {"css": "", "html": "", "js": ""}, "available": False}
