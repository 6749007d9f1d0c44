"""
Tokens Domain - Session token issuing and verification.
"""

from .issuer import TokenService
from .models import TokenClaims

__all__ = ["TokenService", "TokenClaims"]
