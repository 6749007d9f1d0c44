"""
SQLite Repository - Credential store for users and accessibility settings.

Features:
- Async operations via aiosqlite
- Versioned schema migrations applied on initialize
- Unique-constraint violations surfaced as ConflictError
- Missing settings columns surfaced as SchemaOutdatedError
"""

from __future__ import annotations

import logging
import re
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable

import aiosqlite

from learnonauts.config import ConflictError, SchemaOutdatedError, StorageError

from .migrations import MigrationRunner

logger = logging.getLogger(__name__)

__all__ = ["SQLiteRepository"]

_IDENTIFIER = re.compile(r"^[a-z_][a-z0-9_]*$")
_MISSING_COLUMN = re.compile(r"no such column: (\w+)|has no column named (\w+)")
_UNIQUE_FAILED = re.compile(r"UNIQUE constraint failed: users\.(\w+)")

USER_COLUMNS = (
    "id",
    "email",
    "hashed_password",
    "display_name",
    "username",
    "age",
    "reset_key",
    "reset_key_expires",
    "is_banned",
    "last_password_reset",
    "profile_picture_url",
    "created_at",
    "updated_at",
)
_MUTABLE_USER_COLUMNS = frozenset(USER_COLUMNS) - {"id", "created_at"}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _columns(names: Iterable[str]) -> list[str]:
    cols = list(names)
    for name in cols:
        if not _IDENTIFIER.match(name):
            raise ValueError(f"Invalid column name: {name!r}")
    return cols


def _user_row(row: aiosqlite.Row | None) -> dict[str, Any] | None:
    if row is None:
        return None
    user = dict(row)
    user["is_banned"] = bool(user.get("is_banned"))
    return user


def _schema_outdated(e: sqlite3.OperationalError) -> SchemaOutdatedError | None:
    match = _MISSING_COLUMN.search(str(e))
    if not match:
        return None
    column = match.group(1) or match.group(2)
    return SchemaOutdatedError(
        "Settings table is missing expected columns",
        {"column": column},
    )


def _integrity_error(e: sqlite3.IntegrityError) -> ConflictError | StorageError:
    match = _UNIQUE_FAILED.search(str(e))
    if match:
        return ConflictError(f"{match.group(1)} already exists")
    return StorageError("User record rejected by database", {"detail": str(e)})


class SQLiteRepository:
    """
    SQLite repository for users and settings.

    Example:
        >>> repo = SQLiteRepository("data/learnonauts.db")
        >>> await repo.initialize()
        >>> await repo.insert_user({"id": "user_1", "email": "ada@example.com", ...})
        >>> await repo.get_user_by_email("ada@example.com")
    """

    def __init__(self, db_path: str | Path) -> None:
        """
        Initialize repository.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection: aiosqlite.Connection | None = None

    async def _get_connection(self) -> aiosqlite.Connection:
        """Get or create database connection."""
        if self._connection is None:
            self._connection = await aiosqlite.connect(str(self.db_path))
            self._connection.row_factory = aiosqlite.Row
        return self._connection

    async def migrations(self) -> MigrationRunner:
        return MigrationRunner(await self._get_connection())

    async def initialize(self, auto_migrate: bool = True) -> None:
        """
        Bring the schema up to date, or verify it already is.

        Raises:
            StorageError: migrations are pending and ``auto_migrate`` is off
        """
        runner = await self.migrations()
        if auto_migrate:
            applied = await runner.apply()
            logger.info(
                "Database ready: %s (%d migrations applied)", self.db_path, len(applied)
            )
            return

        pending = await runner.pending()
        if pending:
            names = [f"{m.version:03d}_{m.name}" for m in pending]
            raise StorageError(
                "Database schema is out of date",
                {"pending_migrations": names},
            )
        logger.info("Database schema verified: %s", self.db_path)

    # -- users ---------------------------------------------------------------

    async def insert_user(self, user: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a user row.

        Raises:
            ConflictError: email or username already taken
        """
        conn = await self._get_connection()
        now = _now()
        record = {"created_at": now, "updated_at": now, **user}
        cols = _columns(record)
        placeholders = ", ".join("?" for _ in cols)

        try:
            await conn.execute(
                f"INSERT INTO users ({', '.join(cols)}) VALUES ({placeholders})",
                tuple(record[c] for c in cols),
            )
            await conn.commit()
        except sqlite3.IntegrityError as e:
            await conn.rollback()
            raise _integrity_error(e) from e

        created = await self.get_user(record["id"])
        assert created is not None
        return created

    async def get_user(self, user_id: str) -> dict[str, Any] | None:
        """Get user by ID."""
        conn = await self._get_connection()
        cursor = await conn.execute("SELECT * FROM users WHERE id = ?", (user_id,))
        return _user_row(await cursor.fetchone())

    async def get_user_by_email(self, email: str) -> dict[str, Any] | None:
        conn = await self._get_connection()
        cursor = await conn.execute("SELECT * FROM users WHERE email = ?", (email,))
        return _user_row(await cursor.fetchone())

    async def get_user_by_reset_key(self, reset_key: str) -> dict[str, Any] | None:
        conn = await self._get_connection()
        cursor = await conn.execute(
            "SELECT * FROM users WHERE reset_key = ?", (reset_key,)
        )
        return _user_row(await cursor.fetchone())

    async def find_users_by_email_or_username(
        self, email: str, username: str
    ) -> list[dict[str, Any]]:
        """Users holding either identifier."""
        conn = await self._get_connection()
        cursor = await conn.execute(
            "SELECT * FROM users WHERE email = ? OR username = ?", (email, username)
        )
        return [_user_row(row) for row in await cursor.fetchall()]

    async def username_taken(self, username: str, exclude_user_id: str | None = None) -> bool:
        conn = await self._get_connection()
        cursor = await conn.execute(
            "SELECT 1 FROM users WHERE username = ? AND id != ? LIMIT 1",
            (username, exclude_user_id or ""),
        )
        return await cursor.fetchone() is not None

    async def count_users(self) -> int:
        conn = await self._get_connection()
        cursor = await conn.execute("SELECT COUNT(*) FROM users")
        row = await cursor.fetchone()
        return row[0] if row else 0

    async def update_user(
        self, user_id: str, fields: dict[str, Any]
    ) -> dict[str, Any] | None:
        """
        Update columns on a user row and bump ``updated_at``.

        Returns:
            The updated row, or None if the user does not exist

        Raises:
            ConflictError: new email or username already taken
            StorageError: another constraint rejected the change
        """
        unknown = set(fields) - _MUTABLE_USER_COLUMNS
        if unknown:
            raise ValueError(f"Cannot update user columns: {sorted(unknown)}")

        conn = await self._get_connection()
        values = {**fields, "updated_at": _now()}
        cols = _columns(values)
        assignments = ", ".join(f"{c} = ?" for c in cols)

        try:
            cursor = await conn.execute(
                f"UPDATE users SET {assignments} WHERE id = ?",
                (*(values[c] for c in cols), user_id),
            )
            await conn.commit()
        except sqlite3.IntegrityError as e:
            await conn.rollback()
            raise _integrity_error(e) from e

        if cursor.rowcount == 0:
            return None
        return await self.get_user(user_id)

    # -- settings ------------------------------------------------------------

    async def get_settings(
        self, email: str, columns: Iterable[str]
    ) -> dict[str, Any] | None:
        """
        Fetch the named settings columns for a user.

        Raises:
            SchemaOutdatedError: a requested column does not exist
        """
        conn = await self._get_connection()
        cols = _columns(columns)
        try:
            cursor = await conn.execute(
                f"SELECT {', '.join(cols)} FROM settings WHERE user_email = ?",
                (email,),
            )
        except sqlite3.OperationalError as e:
            outdated = _schema_outdated(e)
            if outdated is None:
                raise
            raise outdated from e

        row = await cursor.fetchone()
        return dict(row) if row else None

    async def settings_exist(self, email: str) -> bool:
        conn = await self._get_connection()
        cursor = await conn.execute(
            "SELECT 1 FROM settings WHERE user_email = ? LIMIT 1", (email,)
        )
        return await cursor.fetchone() is not None

    async def insert_settings(self, email: str, values: dict[str, Any]) -> None:
        """
        Insert a settings row.

        Raises:
            SchemaOutdatedError: a column does not exist
        """
        conn = await self._get_connection()
        record = {"user_email": email, **values}
        cols = _columns(record)
        placeholders = ", ".join("?" for _ in cols)
        try:
            await conn.execute(
                f"INSERT INTO settings ({', '.join(cols)}) VALUES ({placeholders})",
                tuple(record[c] for c in cols),
            )
            await conn.commit()
        except sqlite3.OperationalError as e:
            await conn.rollback()
            outdated = _schema_outdated(e)
            if outdated is None:
                raise
            raise outdated from e

    async def update_settings(self, email: str, values: dict[str, Any]) -> int:
        """
        Update only the given settings columns.

        Returns:
            Number of rows changed

        Raises:
            SchemaOutdatedError: a column does not exist
        """
        if not values:
            return 0

        conn = await self._get_connection()
        cols = _columns(values)
        assignments = ", ".join(f"{c} = ?" for c in cols)
        try:
            cursor = await conn.execute(
                f"UPDATE settings SET {assignments} WHERE user_email = ?",
                (*(values[c] for c in cols), email),
            )
            await conn.commit()
        except sqlite3.OperationalError as e:
            await conn.rollback()
            outdated = _schema_outdated(e)
            if outdated is None:
                raise
            raise outdated from e
        return cursor.rowcount

    async def move_settings(self, old_email: str, new_email: str) -> int:
        """Re-key a settings row after an email change."""
        conn = await self._get_connection()
        cursor = await conn.execute(
            "UPDATE settings SET user_email = ? WHERE user_email = ?",
            (new_email, old_email),
        )
        await conn.commit()
        return cursor.rowcount

    async def close(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None
