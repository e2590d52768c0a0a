"""
Current principal for admin pages.

Authentication itself happens upstream; whatever did it stores the
resolved UserModel on request.state.user. Pages rendered without one get
an anonymous principal that holds no permissions.
"""

from __future__ import annotations

from fnmatch import fnmatchcase

from fastapi import Request
from pydantic import BaseModel, Field

SUPERADMIN_ROLE = "superadmin"


class Permission(BaseModel):
    """HTTP methods and path patterns a role may access. Empty methods means any."""

    name: str = ""
    http_method: list[str] = Field(default_factory=list)
    http_path: list[str] = Field(default_factory=list)

    def allows(self, path: str, method: str) -> bool:
        if self.http_method and method.upper() not in {m.upper() for m in self.http_method}:
            return False
        return any(fnmatchcase(path, pattern) for pattern in self.http_path)


class UserModel(BaseModel):
    id: int = 0
    name: str = ""
    avatar: str = ""
    roles: list[str] = Field(default_factory=list)
    permissions: list[Permission] = Field(default_factory=list)

    def is_superadmin(self) -> bool:
        return SUPERADMIN_ROLE in self.roles

    def is_anonymous(self) -> bool:
        return self.id == 0

    def check_permission(self, path: str, method: str = "GET") -> bool:
        if self.is_superadmin():
            return True
        return any(p.allows(path, method) for p in self.permissions)


def anonymous_user() -> UserModel:
    return UserModel()


def auth(request: Request) -> UserModel:
    """Return the principal attached to the request."""
    user = getattr(request.state, "user", None)
    if isinstance(user, UserModel):
        return user
    return anonymous_user()
