"""UI service carrying the navigation buttons shown on every page."""

from __future__ import annotations

from dataclasses import dataclass, field

from panelkit.services import UI_SERVICE, ServiceList
from panelkit.template.types import Buttons


@dataclass
class UIService:
    nav_buttons: Buttons = field(default_factory=Buttons)


def get_ui_service(services: ServiceList) -> UIService:
    service = services.get_service(UI_SERVICE)
    if not isinstance(service, UIService):
        raise TypeError(f"service '{UI_SERVICE}' is {type(service).__name__}, expected UIService")
    return service
