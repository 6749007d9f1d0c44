"""
Object Storage - Public file storage for profile pictures.

SupabaseStorageClient uploads to a Supabase storage bucket. The Supabase
SDK is synchronous, so calls run in a worker thread.
InMemoryStorageClient keeps objects in a dict and is used in tests.
"""

from __future__ import annotations

import asyncio
import logging

from supabase import Client, create_client

from learnonauts.config import UpstreamError

logger = logging.getLogger(__name__)

__all__ = ["SupabaseStorageClient", "InMemoryStorageClient"]


class SupabaseStorageClient:
    """
    Upload objects to a Supabase bucket and return their public URLs.

    Example:
        >>> storage = SupabaseStorageClient(url, key, bucket="profile")
        >>> await storage.upload("profile/user_1_1700000000000_me.jpg", data, "image/jpeg")
        'https://xyz.supabase.co/storage/v1/object/public/profile/profile/user_1_...'
    """

    def __init__(self, url: str, key: str, bucket: str = "profile") -> None:
        self.bucket = bucket
        self._client: Client = create_client(url, key)
        logger.info("Supabase storage client initialized (bucket=%s)", bucket)

    def _upload_sync(self, path: str, data: bytes, content_type: str) -> str:
        bucket = self._client.storage.from_(self.bucket)
        bucket.upload(
            path=path,
            file=data,
            file_options={"content-type": content_type, "upsert": "true"},
        )
        return bucket.get_public_url(path)

    async def upload(self, path: str, data: bytes, content_type: str) -> str:
        """
        Store an object and return its public URL.

        Raises:
            UpstreamError: the upload failed or no URL came back
        """
        try:
            url = await asyncio.to_thread(self._upload_sync, path, data, content_type)
        except Exception as e:
            logger.error("Supabase upload of %s failed: %s", path, e, exc_info=True)
            raise UpstreamError("Failed to upload image", {"detail": str(e)}) from e

        if not url:
            raise UpstreamError("Failed to get image URL")
        logger.info("Uploaded %s (%d bytes)", path, len(data))
        return url


class InMemoryStorageClient:
    """Keep uploaded objects in memory."""

    def __init__(self, base_url: str = "https://storage.local/public") -> None:
        self.base_url = base_url.rstrip("/")
        self.objects: dict[str, tuple[bytes, str]] = {}

    async def upload(self, path: str, data: bytes, content_type: str) -> str:
        self.objects[path] = (data, content_type)
        return f"{self.base_url}/{path}"
