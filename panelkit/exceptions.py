"""
Custom Exception Classes for panelkit

Every error raised by the plugin subsystem derives from PanelError so the
HTTP layer can turn it into a consistent JSON envelope.
"""

from enum import Enum
from typing import Any

from fastapi import status


class ErrorCode(str, Enum):
    """Machine-readable error codes included in error responses."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    PLUGIN_NOT_FOUND = "PLUGIN_NOT_FOUND"
    PLUGIN_LOAD_FAILED = "PLUGIN_LOAD_FAILED"
    CATALOG_UNAVAILABLE = "CATALOG_UNAVAILABLE"
    TEMPLATE_RENDER_FAILED = "TEMPLATE_RENDER_FAILED"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


class PanelError(Exception):
    """Base exception class for all panelkit exceptions"""

    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


# ============================================================================
# Plugin Exceptions
# ============================================================================


class PluginLoadError(PanelError):
    """Raised when a plugin file cannot be turned into a Plugin instance"""

    error_code = ErrorCode.PLUGIN_LOAD_FAILED

    def __init__(self, message: str, path: str | None = None):
        details = {"path": path} if path else {}
        super().__init__(message=message, details=details)


class PluginNotFoundError(PanelError):
    """Raised when no plugin with the requested name is known"""

    error_code = ErrorCode.PLUGIN_NOT_FOUND

    def __init__(self, name: str):
        super().__init__(
            message=f"Plugin '{name}' not found",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"name": name},
        )


# ============================================================================
# Remote Catalog Exceptions
# ============================================================================


class RemoteCatalogError(PanelError):
    """Raised when the remote plugin catalog cannot be fetched or understood"""

    error_code = ErrorCode.CATALOG_UNAVAILABLE

    TRANSPORT = "transport"
    DECODE = "decode"
    STATUS = "status"

    def __init__(self, message: str, kind: str = TRANSPORT, code: int | None = None):
        self.kind = kind
        details: dict[str, Any] = {"kind": kind}
        if code is not None:
            details["code"] = code
        super().__init__(message=message, status_code=status.HTTP_502_BAD_GATEWAY, details=details)


# ============================================================================
# Rendering Exceptions
# ============================================================================


class TemplateRenderError(PanelError):
    """Raised when a plugin template file fails to parse or execute"""

    error_code = ErrorCode.TEMPLATE_RENDER_FAILED

    def __init__(self, message: str, files: list[str] | None = None):
        details = {"files": files} if files else {}
        super().__init__(message=message, details=details)
