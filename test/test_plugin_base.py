"""
Plugin contract and base class tests

All tests avoid a live database; the connection handle is a sentinel.

Test classes:
    TestInfo          — descriptor record and is_free()
    TestPluginContract — abstract contract
    TestBaseDefaults  — default behaviour of Base
    TestBasePlugin    — Info-backed plugins
    TestPlugins       — name-unique collection
"""

from __future__ import annotations

import asyncio
import inspect

import pytest
from utils.plugins import ExamplePlugin

from panelkit.context import App, RoutePath
from panelkit.plugins.base import (
    Base,
    BasePlugin,
    Info,
    Plugin,
    Plugins,
    get_handler,
    get_plugins_with_infos,
    new_base_plugin_with_info,
)
from panelkit.services import DB_SERVICE, ServiceList
from panelkit.ui import UIService

# ══════════════════════════════════════════════════════════════════════════════
# 1. TestInfo
# ══════════════════════════════════════════════════════════════════════════════


class TestInfo:
    def test_empty_price_is_free(self):
        assert Info(price=[]).is_free()

    def test_priced_plugin_is_not_free(self):
        assert not Info(price=["9.99"]).is_free()

    def test_defaults_are_empty(self):
        info = Info()
        assert info.name == ""
        assert info.banners == []
        assert info.create_date is None
        assert info.good_num == 0

    def test_list_defaults_not_shared(self):
        a, b = Info(), Info()
        a.price.append("1")
        assert b.price == []

    def test_parses_catalog_json(self):
        info = Info.model_validate(
            {
                "name": "filemanager",
                "uuid": "2a6d5b1c",
                "title": "File manager",
                "price": ["19.9"],
                "good_num": 12,
                "comment_num": 3,
                "create_date": "2020-05-01T10:00:00Z",
                "has_bought": True,
                "unknown_field": "ignored",
            }
        )
        assert info.name == "filemanager"
        assert info.create_date.year == 2020
        assert info.has_bought is True
        assert not info.is_free()


# ══════════════════════════════════════════════════════════════════════════════
# 2. TestPluginContract
# ══════════════════════════════════════════════════════════════════════════════


class TestPluginContract:
    def test_plugin_is_abstract(self):
        with pytest.raises(TypeError):
            Plugin()  # type: ignore[abstract]

    def test_contract_methods(self):
        expected = {
            "get_handler",
            "init_plugin",
            "name",
            "prefix",
            "get_info",
            "get_index_url",
            "get_installation_page",
            "is_installed",
            "check_update",
            "uninstall",
            "upgrade",
        }
        assert expected == set(Plugin.__abstractmethods__)

    def test_lifecycle_methods_are_coroutines(self):
        for method in ("init_plugin", "check_update", "uninstall", "upgrade"):
            assert inspect.iscoroutinefunction(getattr(Base, method))

    def test_base_satisfies_contract(self):
        assert isinstance(Base(name="x"), Plugin)


# ══════════════════════════════════════════════════════════════════════════════
# 3. TestBaseDefaults
# ══════════════════════════════════════════════════════════════════════════════


class TestBaseDefaults:
    def test_identity(self):
        b = Base(name="news", prefix="news")
        assert b.name() == "news"
        assert b.prefix() == "news"

    def test_default_info_is_empty(self):
        assert Base(name="x").get_info() == Info()

    def test_default_index_url_empty(self):
        assert Base(name="x").get_index_url() == ""

    def test_not_installed_by_default(self):
        assert Base(name="x").is_installed() is False

    def test_installation_page_skipped(self):
        skip, gen = Base(name="x").get_installation_page()
        assert skip is True
        assert gen is None

    def test_no_update(self):
        assert asyncio.run(Base(name="x").check_update()) == (False, "")

    def test_uninstall_and_upgrade_succeed_silently(self):
        b = Base(name="x")
        assert asyncio.run(b.uninstall()) is None
        assert asyncio.run(b.upgrade()) is None

    def test_init_plugin_is_noop(self, services):
        b = Base(name="x")
        asyncio.run(b.init_plugin(services))
        assert b.conn is None
        assert b.ui is None

    def test_init_base_populates_handles(self, services):
        b = Base(name="x")
        b.init_base(services)
        assert b.services is services
        assert b.conn is services[DB_SERVICE]
        assert isinstance(b.ui, UIService)

    def test_init_base_missing_service(self):
        with pytest.raises(KeyError, match="db"):
            Base(name="x").init_base(ServiceList())

    def test_get_handler_returns_app_handlers(self):
        p = ExamplePlugin()
        handlers = p.get_handler()
        assert handlers is p.app.handlers
        assert RoutePath("/example/info", "GET") in handlers
        assert RoutePath("/example/broken", "GET") in handlers

    def test_get_handler_helper(self):
        app = App("blog")

        @app.post("/save")
        async def save():
            return {}

        assert get_handler(app) == {RoutePath("/blog/save", "POST"): save}

    def test_supplied_app_is_used(self):
        app = App("shared")
        assert Base(name="x", app=app).app is app


# ══════════════════════════════════════════════════════════════════════════════
# 4. TestBasePlugin
# ══════════════════════════════════════════════════════════════════════════════


class TestBasePlugin:
    def test_name_comes_from_info(self):
        p = BasePlugin(info=Info(name="cms", title="CMS"))
        assert p.name() == "cms"
        assert p.get_info().title == "CMS"

    def test_new_base_plugin_with_info(self):
        info = Info(name="chart")
        p = new_base_plugin_with_info(info)
        assert isinstance(p, Plugin)
        assert p.get_info() is info

    def test_get_plugins_with_infos_preserves_order(self):
        plugs = get_plugins_with_infos([Info(name="a"), Info(name="b"), Info(name="c")])
        assert isinstance(plugs, Plugins)
        assert [p.name() for p in plugs] == ["a", "b", "c"]

    def test_descriptor_plugin_is_not_installed(self):
        assert BasePlugin(info=Info(name="x")).is_installed() is False


# ══════════════════════════════════════════════════════════════════════════════
# 5. TestPlugins
# ══════════════════════════════════════════════════════════════════════════════


class TestPlugins:
    def test_add_is_idempotent_by_name(self):
        first = Base(name="dup")
        second = Base(name="dup")
        plugs = Plugins().add(first).add(second)
        assert len(plugs) == 1
        assert plugs[0] is first

    def test_exist_uses_name(self):
        plugs = Plugins([Base(name="a")])
        assert plugs.exist(BasePlugin(info=Info(name="a")))
        assert not plugs.exist(Base(name="b"))

    def test_find(self):
        target = Base(name="b")
        plugs = Plugins([Base(name="a"), target])
        assert plugs.find("b") is target
        assert plugs.find("zzz") is None
