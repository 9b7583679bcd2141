"""
UserStore — the persistence contract consumed by the auth core, plus the
SQLAlchemy-backed implementation used by the service.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from auth.errors import Conflict
from auth.models import Role, UserRecord, normalize_email
from database.models import User

logger = logging.getLogger(__name__)


class DeleteOutcome(str, Enum):
    DELETED = "deleted"
    NOT_FOUND = "not_found"
    LAST_ADMIN = "last_admin"


def _to_uuid(value: str | uuid.UUID) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def _to_record(row: User) -> UserRecord:
    return UserRecord(
        id=row.user_id,
        name=row.name,
        email=row.email,
        role=Role(row.role),
        created_at=row.created_at,
        password_hash=row.password_hash,
    )


class UserStore(ABC):
    """Abstract user persistence used by AuthService, AccessGuard and the lifecycle manager."""

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        ...

    @abstractmethod
    async def find_by_id(self, user_id: str | uuid.UUID) -> Optional[UserRecord]:
        ...

    @abstractmethod
    async def insert(self, name: str, email: str, password_hash: str, role: Role) -> UserRecord:
        """Create a user. Raises ``Conflict`` when the email is taken."""
        ...

    @abstractmethod
    async def update(self, user_id: str | uuid.UUID, fields: Dict[str, str]) -> Optional[UserRecord]:
        """
        Apply a partial update of ``name`` / ``email``.

        Returns ``None`` if the user does not exist and raises ``Conflict``
        when the new email belongs to someone else.
        """
        ...

    @abstractmethod
    async def delete(self, user_id: str | uuid.UUID) -> bool:
        ...

    @abstractmethod
    async def count_by_role(self, role: Role) -> int:
        ...

    @abstractmethod
    async def list_all(self) -> List[UserRecord]:
        """All users, newest first."""
        ...

    @abstractmethod
    async def delete_unless_last_admin(self, user_id: str | uuid.UUID) -> DeleteOutcome:
        """Atomically delete a user unless it is the only remaining admin."""
        ...


class SqlUserStore(UserStore):
    """UserStore over an async SQLAlchemy session factory."""

    _UPDATABLE = ("name", "email")

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        # Serializes guarded deletes inside this process; row locks cover
        # other processes on backends that support SELECT ... FOR UPDATE.
        self._admin_lock = asyncio.Lock()

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(User).where(User.email == normalize_email(email))
            )
            row = result.scalar_one_or_none()
            return _to_record(row) if row is not None else None

    async def find_by_id(self, user_id: str | uuid.UUID) -> Optional[UserRecord]:
        uid = _to_uuid(user_id)
        if uid is None:
            return None
        async with self._session_factory() as session:
            row = await session.get(User, uid)
            return _to_record(row) if row is not None else None

    async def insert(self, name: str, email: str, password_hash: str, role: Role) -> UserRecord:
        row = User(
            user_id=uuid.uuid4(),
            name=name,
            email=normalize_email(email),
            password_hash=password_hash,
            role=Role.parse(role).value,
            created_at=datetime.now(timezone.utc),
        )
        try:
            async with self._session_factory() as session, session.begin():
                session.add(row)
                await session.flush()
        except IntegrityError as exc:
            raise Conflict() from exc
        return _to_record(row)

    async def update(self, user_id: str | uuid.UUID, fields: Dict[str, str]) -> Optional[UserRecord]:
        uid = _to_uuid(user_id)
        if uid is None:
            return None
        changes = {k: v for k, v in fields.items() if k in self._UPDATABLE and v is not None}
        if "email" in changes:
            changes["email"] = normalize_email(changes["email"])

        try:
            async with self._session_factory() as session, session.begin():
                row = await session.get(User, uid, with_for_update=True)
                if row is None:
                    return None
                if "email" in changes and changes["email"] != row.email:
                    taken = await session.execute(
                        select(User.user_id).where(
                            User.email == changes["email"], User.user_id != uid
                        )
                    )
                    if taken.first() is not None:
                        raise Conflict("Email already in use")
                for key, value in changes.items():
                    setattr(row, key, value)
                await session.flush()
        except IntegrityError as exc:
            raise Conflict("Email already in use") from exc
        return _to_record(row)

    async def delete(self, user_id: str | uuid.UUID) -> bool:
        uid = _to_uuid(user_id)
        if uid is None:
            return False
        async with self._session_factory() as session, session.begin():
            result = await session.execute(delete(User).where(User.user_id == uid))
            return result.rowcount > 0

    async def count_by_role(self, role: Role) -> int:
        async with self._session_factory() as session:
            result = await session.execute(
                select(func.count()).select_from(User).where(User.role == Role.parse(role).value)
            )
            return int(result.scalar_one())

    async def list_all(self) -> List[UserRecord]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(User).order_by(User.created_at.desc())
            )
            return [_to_record(row) for row in result.scalars().all()]

    async def delete_unless_last_admin(self, user_id: str | uuid.UUID) -> DeleteOutcome:
        uid = _to_uuid(user_id)
        if uid is None:
            return DeleteOutcome.NOT_FOUND

        async with self._admin_lock:
            async with self._session_factory() as session, session.begin():
                row = await session.get(User, uid, with_for_update=True)
                if row is None:
                    return DeleteOutcome.NOT_FOUND

                if row.role == Role.ADMIN.value:
                    admins = await session.execute(
                        select(User.user_id)
                        .where(User.role == Role.ADMIN.value)
                        .with_for_update()
                    )
                    if len(admins.all()) <= 1:
                        logger.warning("Refusing to delete last admin %s", uid)
                        return DeleteOutcome.LAST_ADMIN

                await session.delete(row)

        logger.info("Deleted user %s", uid)
        return DeleteOutcome.DELETED
