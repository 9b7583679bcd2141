"""
Domain types shared by the auth and user-lifecycle layers.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict

from auth.errors import InvalidRole


class Role(str, Enum):
    ADMIN = "admin"
    STUDENT = "student"

    @classmethod
    def parse(cls, value: "str | Role") -> "Role":
        """Match *value* exactly against the role names; anything else raises ``InvalidRole``."""
        if isinstance(value, Role):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidRole() from None


class PublicUser(BaseModel):
    """User view that is safe to hand to clients (no credential material)."""

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    name: str
    email: str
    role: Role
    created_at: datetime


class UserRecord(PublicUser):
    """Full user row as returned by the store."""

    password_hash: str

    def public(self) -> PublicUser:
        return PublicUser(**self.model_dump(exclude={"password_hash"}))

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()
