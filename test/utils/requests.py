"""Helpers for building Starlette requests without a running server."""

from starlette.requests import Request

from panelkit.auth import UserModel


def make_request(path: str = "/admin/dashboard", pjax: bool = False, user: UserModel | None = None) -> Request:
    headers = [(b"host", b"testserver")]
    if pjax:
        headers.append((b"x-pjax", b"true"))
    scope = {
        "type": "http",
        "method": "GET",
        "scheme": "http",
        "path": path,
        "root_path": "",
        "query_string": b"",
        "headers": headers,
        "state": {},
    }
    request = Request(scope)
    if user is not None:
        request.state.user = user
    return request
