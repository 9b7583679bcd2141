"""
UserLifecycleManager — listing, profile updates and account deletion.

Authorization rules:
  • admins may read, update and delete any account
  • students may read and update only their own account
  • the last remaining admin can never be deleted
"""

from __future__ import annotations

import logging
import uuid
from typing import Dict, List, Optional

from auth.errors import Conflict, Forbidden, InvalidField, LastAdminViolation, NotFound
from auth.models import PublicUser, UserRecord, normalize_email
from database.user_store import DeleteOutcome, UserStore

logger = logging.getLogger(__name__)


def _same_user(user: UserRecord, target_id: str | uuid.UUID) -> bool:
    return str(user.id) == str(target_id).strip().lower()


class UserLifecycleManager:
    def __init__(self, store: UserStore) -> None:
        self._store = store

    async def list_all(self) -> List[PublicUser]:
        """All users, newest first. Callers gate this on the admin role."""
        return [user.public() for user in await self._store.list_all()]

    async def profile(self, acting_user: UserRecord) -> PublicUser:
        return acting_user.public()

    async def update_user(
        self,
        acting_user: UserRecord,
        target_id: str | uuid.UUID,
        fields: Dict[str, Optional[str]],
    ) -> PublicUser:
        """
        Partially update ``name`` / ``email`` of ``target_id``.

        Omitted (or ``None``) fields are left unchanged. A new email that
        belongs to another account is rejected with ``Conflict``.
        """
        if not acting_user.is_admin and not _same_user(acting_user, target_id):
            raise Forbidden()

        changes = {k: v for k, v in fields.items() if k in ("name", "email") and v is not None}
        if "name" in changes:
            changes["name"] = changes["name"].strip()
            if not changes["name"]:
                raise InvalidField("Name must not be blank")
        if "email" in changes:
            changes["email"] = normalize_email(changes["email"])
            if await self._store.find_by_id(target_id) is None:
                raise NotFound()
            holder = await self._store.find_by_email(changes["email"])
            if holder is not None and not _same_user(holder, target_id):
                raise Conflict("Email already in use")

        if changes:
            updated = await self._store.update(target_id, changes)
        else:
            updated = await self._store.find_by_id(target_id)
        if updated is None:
            raise NotFound()

        logger.info(
            "User %s updated %s (%s)",
            acting_user.id, updated.id, ", ".join(sorted(changes)) or "no changes",
        )
        return updated.public()

    async def delete_user(self, acting_user: UserRecord, target_id: str | uuid.UUID) -> None:
        """
        Delete ``target_id``. Admin-only; the role check happens in the
        route's AccessGuard dependency.
        """
        outcome = await self._store.delete_unless_last_admin(target_id)
        if outcome is DeleteOutcome.NOT_FOUND:
            raise NotFound()
        if outcome is DeleteOutcome.LAST_ADMIN:
            raise LastAdminViolation()
        logger.info("User %s deleted %s", acting_user.id, target_id)
