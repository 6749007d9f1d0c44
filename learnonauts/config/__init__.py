"""
Configuration - Application settings and error taxonomy.
"""

from .errors import (
    AuthenticationError,
    ConflictError,
    ErrorCode,
    InvalidInputError,
    LearnonautsError,
    NotFoundError,
    ResetKeyError,
    SchemaOutdatedError,
    StorageError,
    TokenError,
    UpstreamError,
)
from .settings import Settings, get_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    # Errors
    "ErrorCode",
    "LearnonautsError",
    "InvalidInputError",
    "ResetKeyError",
    "AuthenticationError",
    "TokenError",
    "NotFoundError",
    "ConflictError",
    "UpstreamError",
    "StorageError",
    "SchemaOutdatedError",
]
