"""
AuthService — account registration and credential login.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from auth.errors import AuthenticationFailed, Conflict, InvalidField
from auth.jwt import TokenCodec
from auth.models import PublicUser, Role, normalize_email
from auth.password import CredentialVerifier
from database.user_store import UserStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    token: str
    user: PublicUser


class AuthService:
    def __init__(
        self,
        store: UserStore,
        verifier: CredentialVerifier,
        codec: TokenCodec,
    ) -> None:
        self._store = store
        self._verifier = verifier
        self._codec = codec

    async def register(self, name: str, email: str, secret: str, role: str | Role) -> PublicUser:
        """
        Create a new account. No token is issued; the caller logs in
        separately.

        Raises ``InvalidRole`` for roles outside admin/student and
        ``Conflict`` when the email is already registered.
        """
        parsed_role = Role.parse(role)
        name = (name or "").strip()
        if not name:
            raise InvalidField("Name must not be blank")
        email = normalize_email(email)

        if await self._store.find_by_email(email) is not None:
            raise Conflict()

        # bcrypt is CPU-bound; keep it off the event loop.
        password_hash = await asyncio.to_thread(self._verifier.hash, secret)
        user = await self._store.insert(name, email, password_hash, parsed_role)

        logger.info("Registered %s %s (%s)", user.role.value, user.email, user.id)
        return user.public()

    async def login(self, email: str, secret: str) -> LoginResult:
        """Check credentials and issue a session token bound to the user's id and role."""
        user = await self._store.find_by_email(email)
        if user is None:
            await asyncio.to_thread(self._verifier.reject, secret)
            logger.info("Login failed for %s: unknown email", normalize_email(email))
            raise AuthenticationFailed()

        ok = await asyncio.to_thread(self._verifier.check, user.password_hash, secret)
        if not ok:
            logger.info("Login failed for %s: bad credentials", user.email)
            raise AuthenticationFailed()

        token = self._codec.issue(user.id, user.role)
        logger.info("Login: %s (%s)", user.email, user.id)
        return LoginResult(token=token, user=user.public())
