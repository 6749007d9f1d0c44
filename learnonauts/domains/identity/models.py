"""
Identity Models - Data types for accounts and sessions.
"""

from __future__ import annotations

import secrets
import time
from typing import Any

from pydantic import BaseModel, ConfigDict


def new_user_id() -> str:
    """Opaque id of the form ``user_<epoch-ms>_<9 hex chars>``."""
    return f"user_{int(time.time() * 1000)}_{secrets.token_hex(5)[:9]}"


class User(BaseModel):
    """A stored account row."""

    model_config = ConfigDict(frozen=True)

    id: str
    email: str
    hashed_password: str
    display_name: str
    username: str
    age: int | None = None
    is_banned: bool = False
    reset_key: str | None = None
    reset_key_expires: str | None = None
    last_password_reset: str | None = None
    profile_picture_url: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    def to_public(self) -> dict[str, Any]:
        """Fields safe to return to the account owner."""
        return {
            "id": self.id,
            "email": self.email,
            "displayName": self.display_name,
            "username": self.username,
            "age": self.age,
            "profilePictureUrl": self.profile_picture_url,
        }

    def to_profile(self) -> dict[str, Any]:
        """Public fields plus account status and timestamps."""
        return {
            **self.to_public(),
            "isBanned": self.is_banned,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


class AuthResult(BaseModel):
    """A user together with a freshly issued bearer token."""

    model_config = ConfigDict(frozen=True)

    user: User
    token: str


class ProfileUpdate(BaseModel):
    """Partial profile change; only explicitly set fields are written."""

    display_name: str | None = None
    username: str | None = None
    age: int | None = None
    profile_picture_url: str | None = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)
