"""
Exception handlers for the admin API and plugin pages.

Error envelope:
{
    "error": {
        "status_code": 404,
        "error_code": "PLUGIN_NOT_FOUND",
        "message": "Plugin 'seo' not found",
        "type": "Not Found",
        "details": {"name": "seo"},
        "path": "/api/v1/plugins/seo",
        "plugin": "seo",            # only when a plugin route raised
        "request_id": "3f2a..."
    }
}
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from panelkit.exceptions import ErrorCode, PanelError, RemoteCatalogError
from panelkit.middleware.logging import get_request_id, plugin_of

logger = logging.getLogger(__name__)

# Statuses panelkit itself produces: unknown routes and plugins, query
# validation, unexpected failures and catalog outages.
ERROR_TYPES = {
    404: ("Not Found", ErrorCode.RESOURCE_NOT_FOUND),
    405: ("Method Not Allowed", ErrorCode.RESOURCE_NOT_FOUND),
    422: ("Validation Error", ErrorCode.VALIDATION_FAILED),
    500: ("Internal Server Error", ErrorCode.INTERNAL_ERROR),
    502: ("Bad Gateway", ErrorCode.SERVICE_UNAVAILABLE),
}


def get_error_type(status_code: int) -> str:
    return ERROR_TYPES.get(status_code, ("Error", None))[0]


def get_http_error_code(status_code: int) -> ErrorCode:
    return ERROR_TYPES.get(status_code, ("Error", ErrorCode.UNKNOWN_ERROR))[1]


def create_error_response(
    request: Request,
    status_code: int,
    message: str,
    error_code: ErrorCode,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    error: dict[str, Any] = {
        "status_code": status_code,
        "error_code": error_code.value,
        "message": message,
        "type": get_error_type(status_code),
        "path": request.url.path,
        "request_id": get_request_id(),
    }
    if details:
        error["details"] = details
    plugin = plugin_of(request)
    if plugin:
        error["plugin"] = plugin
    return JSONResponse(status_code=status_code, content={"error": error})


async def panel_exception_handler(request: Request, exc: PanelError) -> JSONResponse:
    """
    Render a PanelError as the JSON envelope.

    Catalog outages are an upstream condition and log at WARNING; every
    other PanelError means a plugin or the panel itself misbehaved.
    """
    level = logging.WARNING if isinstance(exc, RemoteCatalogError) else logging.ERROR
    logger.log(
        level,
        "%s: %s",
        exc.error_code.value,
        exc.message,
        extra={"error_code": exc.error_code.value, "path": request.url.path, "plugin": plugin_of(request)},
    )
    return create_error_response(request, exc.status_code, exc.message, exc.error_code, exc.details)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    error_code = get_http_error_code(exc.status_code)
    logger.warning(
        "HTTP %d on %s: %s",
        exc.status_code,
        request.url.path,
        exc.detail,
        extra={"error_code": error_code.value, "path": request.url.path},
    )
    return create_error_response(request, exc.status_code, str(exc.detail), error_code)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PanelError, panel_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
