"""
Token Models - Claims carried by session tokens.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class TokenClaims(BaseModel):
    """Identity proven by a verified bearer token."""

    user_id: str
    email: str
    issued_at: datetime | None = None
    expires_at: datetime | None = None

    model_config = {"frozen": True}
