"""
JWT-style token creation and verification.

Tokens are url-safe base64-encoded JSON payloads signed with HMAC-SHA256.
The secret and lifetime come from ``Settings.jwt_secret`` and
``Settings.jwt_expiry_seconds`` and are handed to ``TokenCodec`` at startup.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import time
import uuid
from base64 import urlsafe_b64decode, urlsafe_b64encode
from dataclasses import dataclass
from typing import Callable, Optional

from auth.models import Role


class TokenError(Exception):
    """Base class for token verification failures."""


class InvalidSignature(TokenError):
    pass


class Expired(TokenError):
    pass


@dataclass(frozen=True)
class TokenClaims:
    subject: str
    role: Role
    issued_at: int
    expires_at: int


def _b64encode(raw: bytes) -> str:
    return urlsafe_b64encode(raw).rstrip(b"=").decode()


def _b64decode(data: str) -> bytes:
    return urlsafe_b64decode(data + "=" * (-len(data) % 4))


class TokenCodec:
    """Signs and verifies session tokens with a single process-wide secret."""

    def __init__(
        self,
        secret: str,
        lifetime_seconds: int,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not secret:
            raise ValueError("token secret must not be blank")
        if lifetime_seconds <= 0:
            raise ValueError("token lifetime must be positive")
        self._secret = secret.encode()
        self._lifetime = int(lifetime_seconds)
        self._clock = clock

    @property
    def lifetime_seconds(self) -> int:
        return self._lifetime

    def _sign(self, encoded: str) -> str:
        return hmac.new(self._secret, encoded.encode(), hashlib.sha256).hexdigest()

    def issue(
        self,
        subject: str | uuid.UUID,
        role: Role,
        lifetime: Optional[int] = None,
    ) -> str:
        """Create a signed token for ``subject`` valid for ``lifetime`` seconds."""
        now = int(self._clock())
        payload = {
            "sub": str(subject),
            "role": Role.parse(role).value,
            "iat": now,
            "exp": now + int(lifetime if lifetime is not None else self._lifetime),
        }
        encoded = _b64encode(json.dumps(payload, separators=(",", ":")).encode())
        return encoded + "." + self._sign(encoded)

    def verify(self, token: str) -> TokenClaims:
        """
        Verify ``token`` and return its claims.

        Raises ``InvalidSignature`` for malformed or tampered tokens and
        ``Expired`` once the clock has reached the embedded expiry.
        """
        parts = (token or "").split(".")
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise InvalidSignature("bad format")
        encoded, signature = parts
        expected = self._sign(encoded).encode()
        if not hmac.compare_digest(signature.encode("utf-8", "surrogateescape"), expected):
            raise InvalidSignature("bad signature")

        try:
            payload = json.loads(_b64decode(encoded))
            claims = TokenClaims(
                subject=str(payload["sub"]),
                role=Role(payload["role"]),
                issued_at=int(payload["iat"]),
                expires_at=int(payload["exp"]),
            )
        except (ValueError, KeyError, TypeError) as exc:
            raise InvalidSignature("bad payload") from exc

        if self._clock() >= claims.expires_at:
            raise Expired("token expired")
        return claims
