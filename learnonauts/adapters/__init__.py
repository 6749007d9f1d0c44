"""
Adapters - External service integrations.

All storage, mail, object storage and AI provider calls are wrapped here to
isolate domains from third-party changes.
"""

from .gemini import GeminiProxy
from .mail import LoggingMailer, SmtpMailer
from .sqlite import SQLiteRepository
from .storage import InMemoryStorageClient, SupabaseStorageClient

__all__ = [
    "SQLiteRepository",
    "SmtpMailer",
    "LoggingMailer",
    "SupabaseStorageClient",
    "InMemoryStorageClient",
    "GeminiProxy",
]
