"""
Password hashing and verification.

Uses bcrypt for password hashing with automatic
salting and configurable work factor.
"""

from __future__ import annotations

import secrets

import bcrypt

DEFAULT_ROUNDS = 12


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Hash a password with bcrypt (auto-salted)."""
    if not password:
        raise ValueError("password must not be blank")
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=rounds)).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time comparison against a bcrypt hash."""
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except (ValueError, TypeError):
        return False


class CredentialVerifier:
    """Hashes new credentials and checks submitted ones against stored hashes."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        self.rounds = rounds
        # Same cost as real hashes, so a missing account takes as long to reject.
        self._dummy_hash = hash_password(secrets.token_urlsafe(16), rounds)

    def hash(self, secret: str) -> str:
        return hash_password(secret, self.rounds)

    def check(self, stored_hash: str, submitted_secret: str) -> bool:
        return verify_password(submitted_secret, stored_hash)

    def reject(self, submitted_secret: str) -> bool:
        """Burn one bcrypt check for an unknown account; always ``False``."""
        verify_password(submitted_secret or "x", self._dummy_hash)
        return False
