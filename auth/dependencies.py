"""
FastAPI dependencies for authentication.

Provides ``get_current_user`` and ``require_admin`` dependencies that
are used across all protected routes, plus accessors for the services
``main.create_app`` stores on ``app.state``.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Optional

from fastapi import Request

from auth.guard import AccessGuard
from auth.models import Role, UserRecord
from auth.service import AuthService
from core.user_lifecycle import UserLifecycleManager


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_lifecycle(request: Request) -> UserLifecycleManager:
    return request.app.state.lifecycle


def require_role(required_role: Optional[Role] = None) -> Callable[[Request], Awaitable[UserRecord]]:
    """
    Build a dependency that verifies the Bearer token and, when
    ``required_role`` is given, the caller's role.

    The resolved user is also attached to ``request.state.user``.
    """

    async def dependency(request: Request) -> UserRecord:
        guard: AccessGuard = request.app.state.access_guard
        user = await guard.authorize(request.headers.get("Authorization"), required_role)
        request.state.user = user
        return user

    return dependency


get_current_user = require_role()
require_admin = require_role(Role.ADMIN)
