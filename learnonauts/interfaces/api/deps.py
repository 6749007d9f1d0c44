"""
API Dependencies - Dependency injection for FastAPI routes.

Adapters are process-wide singletons built once from Settings. Domain
services are cheap and are assembled per request from those singletons, so
tests can override any adapter with app.dependency_overrides.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from functools import lru_cache

from fastapi import Depends

from learnonauts.adapters.gemini import GeminiConfig, GeminiProxy
from learnonauts.adapters.mail import LoggingMailer, SmtpMailer
from learnonauts.adapters.sqlite import SQLiteRepository
from learnonauts.adapters.storage import SupabaseStorageClient
from learnonauts.config import get_settings
from learnonauts.config.settings import DEV_JWT_SECRET
from learnonauts.domains.accessibility import SettingsReconciler
from learnonauts.domains.identity import (
    IdentityService,
    ObjectStorage,
    ProfilePictureService,
)
from learnonauts.domains.passwords import Mailer, PasswordHasher, PasswordResetService
from learnonauts.domains.tokens import TokenService

logger = logging.getLogger(__name__)


# --- Adapters (singletons) ---


@lru_cache
def get_repository() -> SQLiteRepository:
    """Get SQLite repository singleton."""
    settings = get_settings()
    return SQLiteRepository(settings.db_path)


@lru_cache
def get_token_service() -> TokenService:
    settings = get_settings()
    return TokenService(settings.jwt_secret, ttl=timedelta(days=settings.token_ttl_days))


@lru_cache
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=get_settings().bcrypt_rounds)


@lru_cache
def get_mailer() -> Mailer:
    """SMTP mailer when credentials are configured, else a logging mailer."""
    settings = get_settings()
    if not settings.smtp_configured:
        return LoggingMailer()
    return SmtpMailer(
        settings.smtp_host,
        settings.smtp_port,
        settings.smtp_user,
        settings.smtp_pass,
    )


@lru_cache
def get_object_storage() -> ObjectStorage | None:
    """Supabase storage client, or None when storage is not configured."""
    settings = get_settings()
    if not settings.storage_configured:
        logger.warning("Supabase storage is not configured; uploads are disabled")
        return None
    return SupabaseStorageClient(
        settings.supabase_url, settings.supabase_key, bucket=settings.supabase_bucket
    )


@lru_cache
def get_gemini_proxy() -> GeminiProxy:
    settings = get_settings()
    return GeminiProxy(
        GeminiConfig(
            url=settings.gemini_url,
            api_key=settings.gemini_api_key,
            timeout_seconds=settings.gemini_timeout_seconds,
        )
    )


# --- Domain services (per request) ---


def get_identity_service(
    repo: SQLiteRepository = Depends(get_repository),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
) -> IdentityService:
    return IdentityService(repo, hasher, tokens)


def get_reset_service(
    repo: SQLiteRepository = Depends(get_repository),
    hasher: PasswordHasher = Depends(get_password_hasher),
    mailer: Mailer = Depends(get_mailer),
) -> PasswordResetService:
    settings = get_settings()
    return PasswordResetService(
        repo,
        hasher,
        mailer,
        settings.frontend_url,
        ttl=timedelta(minutes=settings.reset_key_ttl_minutes),
    )


def get_settings_reconciler(
    repo: SQLiteRepository = Depends(get_repository),
) -> SettingsReconciler:
    return SettingsReconciler(repo)


def get_picture_service(
    storage: ObjectStorage | None = Depends(get_object_storage),
    identity: IdentityService = Depends(get_identity_service),
) -> ProfilePictureService:
    return ProfilePictureService(
        storage, identity, max_bytes=get_settings().max_upload_bytes
    )


# --- Lifecycle ---


async def init_services() -> None:
    """
    Initialize services on startup.

    This should be called from the FastAPI lifespan handler.

    Raises:
        StorageError: migrations are pending and AUTO_MIGRATE is off
    """
    settings = get_settings()
    if settings.jwt_secret == DEV_JWT_SECRET:
        logger.warning("JWT_SECRET is not set; using the development fallback secret")

    repo = get_repository()
    await repo.initialize(auto_migrate=settings.auto_migrate)

    # Build adapters eagerly so configuration problems surface at startup
    get_mailer()
    get_object_storage()
    get_gemini_proxy()


async def cleanup_services() -> None:
    """Cleanup services on shutdown."""
    repo = get_repository()
    await repo.close()
