"""
Structured Logging Middleware

JSON access logs for admin pages. Every record emitted while a request is
served carries its request id; access records also name the plugin that
owns the matched route and whether the navigation was a pjax fragment.
"""

import json
import logging
import time
import uuid
from collections.abc import Callable
from contextvars import ContextVar
from datetime import datetime, timezone

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from panelkit.context import is_pjax

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

ACCESS_LOGGER = "panelkit.access"

# Health checks are never access-logged.
QUIET_PATHS = frozenset({"/health"})

_EXTRA_FIELDS = ("plugin", "pjax", "user_id", "method", "path", "status_code", "duration_ms", "error_code")


def plugin_of(request: Request) -> str:
    """Name of the plugin that served request, or "" for core routes."""
    return getattr(request.state, "plugin", "")


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get("")
        return True


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", ""),
        }
        entry.update({key: getattr(record, key) for key in _EXTRA_FIELDS if hasattr(record, key)})
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """
    Access logging for plugin pages and the admin API.

    The request id comes from X-Request-ID when the caller sends one and
    is echoed back on the response. Plugin routes tag request.state.plugin
    (see engine.mount_plugin); the tag is copied onto the access record so
    a slow or failing page can be traced to its plugin.
    """

    def __init__(self, app: ASGIApp, logger_name: str = ACCESS_LOGGER):
        super().__init__(app)
        self.logger = logging.getLogger(logger_name)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        token = request_id_var.set(request_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            self.access(request, 500, started, error=str(e))
            raise
        finally:
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = request_id
        self.access(request, response.status_code, started)
        return response

    def access(self, request: Request, status_code: int, started: float, error: str | None = None) -> None:
        path = request.url.path
        if path in QUIET_PATHS:
            return

        duration_ms = round((time.perf_counter() - started) * 1000, 2)
        plugin = plugin_of(request)
        extra = {
            "method": request.method,
            "path": path,
            "status_code": status_code,
            "duration_ms": duration_ms,
            "pjax": is_pjax(request),
        }
        if plugin:
            extra["plugin"] = plugin
        user = getattr(request.state, "user", None)
        if getattr(user, "id", 0):
            extra["user_id"] = user.id

        owner = f" [{plugin}]" if plugin else ""
        message = f"{request.method} {path}{owner} -> {status_code} in {duration_ms}ms"
        if error:
            message += f": {error}"

        level = logging.ERROR if status_code >= 500 else logging.WARNING if status_code >= 400 else logging.INFO
        self.logger.log(level, message, extra=extra)


def setup_structured_logging(log_level: str = "INFO", json_format: bool = True, log_file: str | None = None) -> None:
    """
    Configure root logging for the panel.

    Args:
        log_level: level for panelkit loggers (DEBUG, INFO, WARNING, ERROR)
        json_format: emit StructuredFormatter JSON instead of plain lines
        log_file: write to this file instead of stderr
    """
    handler = logging.FileHandler(log_file) if log_file else logging.StreamHandler()
    if json_format:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s [%(request_id)s] %(message)s"))
    handler.addFilter(RequestIdFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(log_level.upper())

    logging.getLogger("panelkit").setLevel(log_level.upper())
    # Catalog requests and DB pooling are noisy below WARNING.
    for name in ("uvicorn.access", "httpx", "sqlalchemy.engine"):
        logging.getLogger(name).setLevel(logging.WARNING)


def get_request_id() -> str:
    return request_id_var.get("")
