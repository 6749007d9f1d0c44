"""
Profile Pictures - Accept a base64 image, store it and link it to the user.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
import time

from learnonauts.config import InvalidInputError, StorageError

from .contracts import ObjectStorage
from .service import IdentityService

logger = logging.getLogger(__name__)

__all__ = ["ProfilePictureService", "DEFAULT_CONTENT_TYPE"]

DEFAULT_CONTENT_TYPE = "image/jpeg"
_DATA_URL = re.compile(r"^data:[\w.+-]+/[\w.+-]+;base64,")
_UNSAFE_FILENAME = re.compile(r"[^A-Za-z0-9._-]+")


def _decode(image: str) -> bytes:
    payload = _DATA_URL.sub("", image.strip(), count=1)
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidInputError("Image data is not valid base64") from e


def _safe_filename(filename: str) -> str:
    name = _UNSAFE_FILENAME.sub("_", filename.rsplit("/", 1)[-1]).strip("._")
    return name or "upload.jpg"


class ProfilePictureService:
    """
    Upload profile pictures to object storage.

    Example:
        >>> pictures = ProfilePictureService(storage, identity, max_bytes=5 * 1024 * 1024)
        >>> url = await pictures.upload("user_1", b64_image, "image/png", "me.png")
    """

    def __init__(
        self,
        storage: ObjectStorage | None,
        identity: IdentityService,
        max_bytes: int = 5 * 1024 * 1024,
    ) -> None:
        self._storage = storage
        self._identity = identity
        self.max_bytes = max_bytes

    def object_path(self, user_id: str, filename: str | None, now_ms: int) -> str:
        name = _safe_filename(filename) if filename else f"profile-{user_id}-{now_ms}.jpg"
        return f"profile/{user_id}_{now_ms}_{name}"

    async def upload(
        self,
        user_id: str,
        image: str | None,
        content_type: str | None = None,
        filename: str | None = None,
    ) -> str:
        """
        Store the image and set it as the user's profile picture.

        Returns:
            Public URL of the stored image

        Raises:
            InvalidInputError: image missing, undecodable or too large
            StorageError: no storage backend configured
            UpstreamError: the storage service failed
            NotFoundError: the account no longer exists
        """
        if not image:
            raise InvalidInputError("No image data provided")
        if self._storage is None:
            raise StorageError("Storage service not configured")

        data = _decode(image)
        if not data:
            raise InvalidInputError("No image data provided")
        if len(data) > self.max_bytes:
            raise InvalidInputError(
                "Image is too large",
                {"max_bytes": self.max_bytes, "size": len(data)},
            )

        path = self.object_path(user_id, filename, int(time.time() * 1000))
        url = await self._storage.upload(path, data, content_type or DEFAULT_CONTENT_TYPE)
        await self._identity.set_profile_picture(user_id, url)
        logger.info("Stored profile picture for user %s (%d bytes)", user_id, len(data))
        return url
