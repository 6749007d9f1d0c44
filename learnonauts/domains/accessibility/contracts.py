"""
Accessibility Contracts - Interfaces for the accessibility domain.
"""

from __future__ import annotations

from typing import Any, Iterable, Protocol, runtime_checkable


@runtime_checkable
class SettingsStore(Protocol):
    """Contract for per-user settings persistence, keyed by email."""

    async def get_settings(
        self, email: str, columns: Iterable[str]
    ) -> dict[str, Any] | None:
        """
        Fetch the named columns.

        Raises:
            SchemaOutdatedError: a requested column does not exist
        """
        ...

    async def settings_exist(self, email: str) -> bool: ...

    async def insert_settings(self, email: str, values: dict[str, Any]) -> None:
        """
        Raises:
            SchemaOutdatedError: a column does not exist
        """
        ...

    async def update_settings(self, email: str, values: dict[str, Any]) -> int:
        """
        Raises:
            SchemaOutdatedError: a column does not exist
        """
        ...
