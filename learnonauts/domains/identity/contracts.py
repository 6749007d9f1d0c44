"""
Identity Contracts - Interfaces for the identity domain.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class UserStore(Protocol):
    """Contract for user persistence. Rows are plain dicts keyed by column."""

    async def insert_user(self, user: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a user row.

        Raises:
            ConflictError: email or username already taken
        """
        ...

    async def get_user(self, user_id: str) -> dict[str, Any] | None: ...

    async def get_user_by_email(self, email: str) -> dict[str, Any] | None: ...

    async def get_user_by_reset_key(self, reset_key: str) -> dict[str, Any] | None: ...

    async def find_users_by_email_or_username(
        self, email: str, username: str
    ) -> list[dict[str, Any]]: ...

    async def username_taken(
        self, username: str, exclude_user_id: str | None = None
    ) -> bool: ...

    async def update_user(
        self, user_id: str, fields: dict[str, Any]
    ) -> dict[str, Any] | None:
        """
        Update columns on a user row.

        Returns:
            The updated row, or None if the user does not exist
        """
        ...

    async def move_settings(self, old_email: str, new_email: str) -> int:
        """Re-key the settings row owned by ``old_email``."""
        ...


@runtime_checkable
class ObjectStorage(Protocol):
    """Contract for public object storage."""

    async def upload(self, path: str, data: bytes, content_type: str) -> str:
        """
        Store an object.

        Returns:
            Public URL of the stored object

        Raises:
            UpstreamError: the storage service failed
        """
        ...
