"""
Error Taxonomy - Consistent error codes across the application.

Usage:
    from learnonauts.config.errors import ConflictError

    raise ConflictError("email already exists")
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Standardized error codes for machine-readable error responses."""

    # Input errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    RESET_KEY_INVALID = "RESET_KEY_INVALID"
    RESET_KEY_EXPIRED = "RESET_KEY_EXPIRED"

    # Security errors
    SECURITY_UNAUTHORIZED = "SECURITY_UNAUTHORIZED"
    SECURITY_FORBIDDEN = "SECURITY_FORBIDDEN"

    # Resource errors
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"

    # Upstream errors
    UPSTREAM_FAILED = "UPSTREAM_FAILED"

    # Storage errors
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"
    STORAGE_SCHEMA_OUTDATED = "STORAGE_SCHEMA_OUTDATED"

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class LearnonautsError(Exception):
    """Base exception with error code support."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to API-friendly dictionary."""
        return {
            "error": self.message,
            "code": self.code.value,
            **self.details,
        }


class InvalidInputError(LearnonautsError):
    """Missing or malformed request input."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.VALIDATION_ERROR, message, details)


class ResetKeyError(LearnonautsError):
    """Reset key is unknown or has expired."""

    def __init__(self, message: str, *, expired: bool = False) -> None:
        code = ErrorCode.RESET_KEY_EXPIRED if expired else ErrorCode.RESET_KEY_INVALID
        super().__init__(code, message)
        self.expired = expired


class AuthenticationError(LearnonautsError):
    """Missing credentials or a failed login."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.SECURITY_UNAUTHORIZED, message, details)


class TokenError(LearnonautsError):
    """Bearer token failed signature or expiry checks."""

    def __init__(self, message: str = "Invalid or expired token") -> None:
        super().__init__(ErrorCode.SECURITY_FORBIDDEN, message)


class NotFoundError(LearnonautsError):
    """Requested record does not exist."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.NOT_FOUND, message, details)


class ConflictError(LearnonautsError):
    """Unique field already taken."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.CONFLICT, message, details)


class UpstreamError(LearnonautsError):
    """Third-party call (mail, AI provider, object storage) failed."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.UPSTREAM_FAILED, message, details)


class StorageError(LearnonautsError):
    """Storage/database errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.STORAGE_UNAVAILABLE, message, details)


class SchemaOutdatedError(LearnonautsError):
    """The live schema is missing columns the code expects."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.STORAGE_SCHEMA_OUTDATED, message, details)
