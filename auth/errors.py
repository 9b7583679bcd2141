"""
Error taxonomy for the identity service.

Every error carries the HTTP status it maps to; ``api.middleware``
turns them into ``{"error": message}`` responses.
"""

from __future__ import annotations

from fastapi import status


class AuthError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST
    message: str = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class InvalidRole(AuthError):
    message = "Invalid role. Must be 'admin' or 'student'"


class InvalidField(AuthError):
    message = "Invalid request"


class Conflict(AuthError):
    message = "User already exists"


class AuthenticationFailed(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid credentials"


class Unauthenticated(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Unauthorized access"


class Forbidden(AuthError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Insufficient permissions"


class NotFound(AuthError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "User not found"


class LastAdminViolation(AuthError):
    message = "Cannot delete the last admin user"


class Internal(AuthError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"
