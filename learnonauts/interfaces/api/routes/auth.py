"""
Auth Routes - Registration, login and password reset.

None of these endpoints require a bearer token.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field

from learnonauts.domains.identity import IdentityService
from learnonauts.domains.passwords import PasswordResetService
from learnonauts.interfaces.api.deps import get_identity_service, get_reset_service

router = APIRouter()

RESET_REQUESTED = "If email exists, password reset instructions have been sent"


class RegisterRequest(BaseModel):
    """Registration body. Required fields are checked by the service."""

    model_config = ConfigDict(populate_by_name=True)

    email: str | None = None
    password: str | None = None
    display_name: str | None = Field(default=None, alias="displayName")
    username: str | None = None
    age: int | None = None


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class ForgotPasswordRequest(BaseModel):
    email: str | None = None


class ResetPasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    reset_key: str | None = Field(default=None, alias="resetKey")
    new_password: str | None = Field(default=None, alias="newPassword")


@router.post("/register", status_code=201)
async def register(
    request: RegisterRequest,
    identity: IdentityService = Depends(get_identity_service),
) -> dict[str, Any]:
    """Create an account and return the user with a session token."""
    result = await identity.register(
        request.email,
        request.password,
        request.display_name,
        request.username,
        request.age,
    )
    return {
        "message": "User registered successfully.",
        "user": result.user.to_public(),
        "token": result.token,
    }


@router.post("/login")
async def login(
    request: LoginRequest,
    identity: IdentityService = Depends(get_identity_service),
) -> dict[str, Any]:
    result = await identity.login(request.email, request.password)
    return {
        "message": "Login successful",
        "user": result.user.to_public(),
        "token": result.token,
    }


@router.post("/forgot-password")
async def forgot_password(
    request: ForgotPasswordRequest,
    resets: PasswordResetService = Depends(get_reset_service),
) -> dict[str, str]:
    """Mail a reset link. The response does not reveal whether the email exists."""
    await resets.request_reset(request.email)
    return {"message": RESET_REQUESTED}


@router.get("/verify-reset-key")
async def verify_reset_key(
    key: str | None = Query(default=None),
    resets: PasswordResetService = Depends(get_reset_service),
) -> dict[str, str]:
    user = await resets.verify_reset_key(key)
    return {"message": "Valid reset key", "email": user.email}


@router.post("/reset-password")
async def reset_password(
    request: ResetPasswordRequest,
    resets: PasswordResetService = Depends(get_reset_service),
) -> dict[str, str]:
    await resets.reset_password(request.reset_key, request.new_password)
    return {"message": "Password reset successfully"}
