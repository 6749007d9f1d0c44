"""
Storage Adapter - Object storage for uploaded images.
"""

from .client import InMemoryStorageClient, SupabaseStorageClient

__all__ = ["SupabaseStorageClient", "InMemoryStorageClient"]
