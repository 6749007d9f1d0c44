"""
Accessibility Routes - Read and write the signed-in user's preferences.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends

from learnonauts.domains.accessibility import SettingsReconciler
from learnonauts.domains.identity import IdentityService
from learnonauts.domains.tokens import TokenClaims
from learnonauts.interfaces.api.auth import get_current_user
from learnonauts.interfaces.api.deps import get_identity_service, get_settings_reconciler

router = APIRouter()

MIGRATION_NOTE = " (note: some settings require database migration to be stored)"


async def get_account_email(
    user: TokenClaims = Depends(get_current_user),
    identity: IdentityService = Depends(get_identity_service),
) -> str:
    """Current email of the token's user; the email claim goes stale after an email change."""
    profile = await identity.get_profile(user.user_id)
    return profile.email


@router.get("")
async def get_accessibility_settings(
    email: str = Depends(get_account_email),
    reconciler: SettingsReconciler = Depends(get_settings_reconciler),
) -> dict[str, Any]:
    """Return every preference, with defaults for anything never saved."""
    snapshot = await reconciler.load(email)

    if not snapshot.stored:
        message = "No existing settings, returning defaults"
    else:
        message = "Settings retrieved successfully"
    if snapshot.degraded:
        message += MIGRATION_NOTE

    return {"message": message, "settings": snapshot.to_wire()}


@router.put("")
async def update_accessibility_settings(
    update: Any = Body(default=None),
    email: str = Depends(get_account_email),
    reconciler: SettingsReconciler = Depends(get_settings_reconciler),
) -> dict[str, Any]:
    """
    Save any recognised preferences from the body.

    Accepts camelCase, snake_case and older key spellings; unknown keys are
    ignored.
    """
    result = await reconciler.apply(email, update)

    if not result.written and not result.skipped:
        message = "No changes to save"
    else:
        message = "Accessibility settings updated successfully"

    body: dict[str, Any] = {"message": message, "settings": result.snapshot.to_wire()}
    if result.needs_migration:
        body["message"] += MIGRATION_NOTE
        body["skipped"] = result.skipped
    return body
