"""
Pytest configuration and fixtures for panelkit tests
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))  # noqa: PTH100, PTH118, PTH119, PTH120

from panelkit.auth import Permission, UserModel
from panelkit.menu import MenuItem, StaticMenuBuilder, set_menu_builder
from panelkit.plugins.registry import PluginRegistry
from panelkit.services import DB_SERVICE, UI_SERVICE, ServiceList
from panelkit.template.types import Button, Buttons
from panelkit.ui import UIService


@pytest.fixture
def registry() -> PluginRegistry:
    """A registry isolated from the process-wide singleton."""
    return PluginRegistry()


@pytest.fixture
def superadmin() -> UserModel:
    return UserModel(id=1, name="root", roles=["superadmin"])


@pytest.fixture
def editor() -> UserModel:
    return UserModel(
        id=2,
        name="editor",
        roles=["editor"],
        permissions=[Permission(name="dashboard", http_method=["GET"], http_path=["/dashboard", "/example/*"])],
    )


@pytest.fixture
def nav_buttons() -> Buttons:
    return Buttons(
        [
            Button(title="Dashboard", url="/dashboard", icon="fa-home"),
            Button(title="Settings", url="/settings", icon="fa-cog"),
        ]
    )


@pytest.fixture
def services(nav_buttons) -> ServiceList:
    return ServiceList({DB_SERVICE: object(), UI_SERVICE: UIService(nav_buttons=nav_buttons)})


@pytest.fixture
def menu_builder():
    """Install a static menu for the duration of a test."""
    builder = StaticMenuBuilder(
        [
            MenuItem(id=1, title="Dashboard", url="/dashboard", icon="fa-home"),
            MenuItem(id=2, title="Example", url="/example/info", icon="fa-plug", plugin_name="example"),
            MenuItem(
                id=3,
                title="Tools",
                icon="fa-wrench",
                children=[MenuItem(id=4, title="Logs", url="/tools/logs")],
            ),
        ]
    )
    set_menu_builder(builder)
    yield builder
    set_menu_builder(StaticMenuBuilder())
