"""
AccessGuard — turns an ``Authorization`` header into an authenticated user,
optionally enforcing a required role.
"""

from __future__ import annotations

import logging
from typing import Optional

from auth.errors import Forbidden, Unauthenticated
from auth.jwt import Expired, TokenCodec, TokenError
from auth.models import Role, UserRecord
from database.user_store import UserStore

logger = logging.getLogger(__name__)


def extract_bearer_token(authorization: Optional[str]) -> str:
    """Return the token from ``Bearer <token>`` or raise ``Unauthenticated``."""
    if not authorization:
        raise Unauthenticated("No token provided")
    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise Unauthenticated("No token provided")
    return token


class AccessGuard:
    def __init__(self, codec: TokenCodec, store: UserStore) -> None:
        self._codec = codec
        self._store = store

    async def authorize(
        self,
        authorization: Optional[str],
        required_role: Optional[Role] = None,
    ) -> UserRecord:
        token = extract_bearer_token(authorization)

        try:
            claims = self._codec.verify(token)
        except Expired:
            raise Unauthenticated("Token expired") from None
        except TokenError:
            raise Unauthenticated("Invalid token") from None

        # The account may have been deleted after the token was issued.
        user = await self._store.find_by_id(claims.subject)
        if user is None:
            logger.info("Token subject %s no longer exists", claims.subject)
            raise Unauthenticated()

        if required_role is not None and user.role is not required_role:
            logger.info(
                "User %s (%s) denied: %s required", user.id, user.role.value, required_role.value
            )
            raise Forbidden()

        return user
