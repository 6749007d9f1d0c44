"""
Authentication Dependencies - Verify bearer session tokens.

Clients send the token issued at register/login in the Authorization
header. A missing header or a non-Bearer scheme is a 401; a token that
fails verification is a 403.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header

from learnonauts.config import AuthenticationError
from learnonauts.domains.tokens import TokenClaims, TokenService
from learnonauts.interfaces.api.deps import get_token_service


async def get_current_user(
    authorization: Optional[str] = Header(None),
    tokens: TokenService = Depends(get_token_service),
) -> TokenClaims:
    """
    Verify the bearer token and return its claims.

    Expects 'Authorization: Bearer <token>' header.

    Raises:
        AuthenticationError: header missing or not a Bearer token (401)
        TokenError: bad signature, tampered or expired token (403)
    """
    if not authorization:
        raise AuthenticationError("Access token required")

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise AuthenticationError("Access token required")

    return tokens.verify(parts[1])
