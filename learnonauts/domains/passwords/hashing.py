"""
Password Hashing - bcrypt with a fixed cost factor.

bcrypt is CPU bound, so hashing and checking run in a worker thread to keep
the event loop responsive.
"""

from __future__ import annotations

import asyncio
import logging
import secrets

import bcrypt

logger = logging.getLogger(__name__)

__all__ = ["PasswordHasher"]

# bcrypt only looks at the first 72 bytes of input
_MAX_PASSWORD_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_MAX_PASSWORD_BYTES]


class PasswordHasher:
    """
    Hash and check passwords.

    Example:
        >>> hasher = PasswordHasher(rounds=10)
        >>> hashed = await hasher.hash("hunter22")
        >>> await hasher.verify("hunter22", hashed)
        True
    """

    def __init__(self, rounds: int = 10) -> None:
        self.rounds = rounds
        self._decoy_hash: str | None = None

    def _hash_sync(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(_encode(password), salt).decode("utf-8")

    @staticmethod
    def _verify_sync(password: str, hashed: str) -> bool:
        try:
            return bcrypt.checkpw(_encode(password), hashed.encode("utf-8"))
        except ValueError as e:
            logger.warning("Stored password hash is unreadable: %s", e)
            return False

    async def hash(self, password: str) -> str:
        """Hash a password with a fresh salt."""
        return await asyncio.to_thread(self._hash_sync, password)

    async def verify(self, password: str, hashed: str) -> bool:
        """Check a password against a stored hash."""
        return await asyncio.to_thread(self._verify_sync, password, hashed)

    async def verify_decoy(self, password: str) -> None:
        """
        Spend the same bcrypt work as ``verify`` when there is no stored hash.

        Used for unknown accounts so response timing does not reveal which
        emails are registered.
        """
        if self._decoy_hash is None:
            self._decoy_hash = await self.hash(secrets.token_hex(16))
        await self.verify(password, self._decoy_hash)
