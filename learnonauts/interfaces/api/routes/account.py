"""
Account Routes - Profile, email, password and picture for the signed-in user.

All endpoints require a bearer token.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from learnonauts.domains.identity import (
    IdentityService,
    ProfilePictureService,
    ProfileUpdate,
)
from learnonauts.domains.tokens import TokenClaims
from learnonauts.interfaces.api.auth import get_current_user
from learnonauts.interfaces.api.deps import get_identity_service, get_picture_service

router = APIRouter()


class ProfileUpdateRequest(BaseModel):
    """Partial profile change; omitted fields are left alone."""

    model_config = ConfigDict(populate_by_name=True)

    display_name: str | None = Field(default=None, alias="displayName")
    username: str | None = None
    age: int | None = None
    profile_picture_url: str | None = Field(default=None, alias="profilePictureUrl")


class UpdateEmailRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    new_email: str | None = Field(default=None, alias="newEmail")


class ChangePasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    old_password: str | None = Field(default=None, alias="oldPassword")
    new_password: str | None = Field(default=None, alias="newPassword")
    confirm_new_password: str | None = Field(default=None, alias="confirmNewPassword")


class UploadPictureRequest(BaseModel):
    image: str | None = None
    type: str | None = None
    filename: str | None = None


@router.get("/me")
async def get_me(
    user: TokenClaims = Depends(get_current_user),
    identity: IdentityService = Depends(get_identity_service),
) -> dict[str, Any]:
    profile = await identity.get_profile(user.user_id)
    return {"user": profile.to_profile()}


@router.put("/me")
async def update_me(
    request: ProfileUpdateRequest,
    user: TokenClaims = Depends(get_current_user),
    identity: IdentityService = Depends(get_identity_service),
) -> dict[str, Any]:
    update = ProfileUpdate(**request.model_dump(exclude_unset=True))
    updated = await identity.update_profile(user.user_id, update)
    return {"message": "Profile updated successfully", "user": updated.to_public()}


@router.post("/update-email")
async def update_email(
    request: UpdateEmailRequest,
    user: TokenClaims = Depends(get_current_user),
    identity: IdentityService = Depends(get_identity_service),
) -> dict[str, Any]:
    """Change email; the old token still carries the old email, so a new one is returned."""
    result = await identity.update_email(user.user_id, request.new_email)
    return {
        "message": "Email updated",
        "user": result.user.to_public(),
        "token": result.token,
    }


@router.put("/change-password")
async def change_password(
    request: ChangePasswordRequest,
    user: TokenClaims = Depends(get_current_user),
    identity: IdentityService = Depends(get_identity_service),
) -> dict[str, str]:
    await identity.change_password(
        user.user_id,
        request.old_password,
        request.new_password,
        request.confirm_new_password,
    )
    return {"message": "Password changed successfully"}


@router.post("/upload-profile-picture")
async def upload_profile_picture(
    request: UploadPictureRequest,
    user: TokenClaims = Depends(get_current_user),
    pictures: ProfilePictureService = Depends(get_picture_service),
) -> dict[str, str]:
    url = await pictures.upload(user.user_id, request.image, request.type, request.filename)
    return {"message": "Profile picture uploaded successfully", "imageUrl": url}


@router.post("/logout")
async def logout(user: TokenClaims = Depends(get_current_user)) -> dict[str, str]:
    """Tokens are stateless; the client discards its copy."""
    return {"message": "Logout successful"}
