"""
Token Issuer - Stateless signed session tokens.

Tokens are HS256 JWTs carrying the user id and email. Validity is enforced
purely by signature and expiry at request time; there is no server-side
revocation list, so logout is advisory.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import jwt

from learnonauts.config import TokenError

from .models import TokenClaims

logger = logging.getLogger(__name__)

__all__ = ["TokenService", "ALGORITHM"]

ALGORITHM = "HS256"


class TokenService:
    """
    Issue and verify bearer tokens.

    Example:
        >>> tokens = TokenService(secret="s3cret", ttl=timedelta(days=30))
        >>> token = tokens.issue("user_1", "ada@example.com")
        >>> tokens.verify(token).email
        'ada@example.com'
    """

    def __init__(self, secret: str, ttl: timedelta = timedelta(days=30)) -> None:
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self.ttl = ttl

    def issue(self, user_id: str, email: str) -> str:
        """Sign a token valid for ``ttl`` from now."""
        now = datetime.now(timezone.utc)
        payload = {
            "id": user_id,
            "email": email,
            "iat": now,
            "exp": now + self.ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> TokenClaims:
        """
        Verify signature and expiry.

        Raises:
            TokenError: bad signature, tampered payload, malformed token,
                missing claims or expired token
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as e:
            logger.debug("Rejected expired token: %s", e)
            raise TokenError() from e
        except jwt.InvalidTokenError as e:
            logger.debug("Rejected invalid token: %s", e)
            raise TokenError() from e

        user_id = payload.get("id")
        email = payload.get("email")
        if not user_id or not email:
            raise TokenError()

        return TokenClaims(
            user_id=user_id,
            email=email,
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
