"""
Settings - Application configuration using Pydantic Settings.

Loads from environment variables and .env files. The instance is frozen and
handed to each component at construction time.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEV_JWT_SECRET = "fallback_jwt_secret_for_dev"
GEMINI_GENERATE_URL = (
    "https://generativelanguage.googleapis.com/v1beta/models/"
    "gemini-2.5-flash:generateContent"
)


class Settings(BaseSettings):
    """Application settings."""

    # Tokens
    jwt_secret: str = DEV_JWT_SECRET
    token_ttl_days: int = 30

    # Passwords
    bcrypt_rounds: int = 10
    reset_key_ttl_minutes: int = 60

    # Database
    db_path: Path = Path("data/learnonauts.db")
    auto_migrate: bool = True

    # Mail
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_user: str | None = Field(
        default=None, validation_alias=AliasChoices("smtp_user", "email_user")
    )
    smtp_pass: str | None = Field(
        default=None, validation_alias=AliasChoices("smtp_pass", "email_pass")
    )
    frontend_url: str = "http://localhost:5173"

    # Gemini
    gemini_api_key: str | None = None
    gemini_url: str = GEMINI_GENERATE_URL
    gemini_timeout_seconds: float = 60.0

    # Object storage (Supabase)
    supabase_url: str | None = None
    supabase_key: str | None = None
    supabase_bucket: str = "profile"
    max_upload_bytes: int = 5 * 1024 * 1024

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8787
    api_debug: bool = False
    cors_origins: list[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @property
    def smtp_configured(self) -> bool:
        return bool(self.smtp_user and self.smtp_pass)

    @property
    def storage_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
