"""
Schema Migrations - Versioned, ordered schema changes for the credential store.

Each migration runs once and is recorded in ``schema_migrations``. The API
applies pending migrations at startup (or refuses to start when
``AUTO_MIGRATE`` is off), so request handlers can rely on a single schema.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

import aiosqlite

logger = logging.getLogger(__name__)

__all__ = ["Migration", "MigrationRunner", "MIGRATIONS", "LATEST_VERSION"]


@dataclass(frozen=True)
class Migration:
    """A single schema step."""

    version: int
    name: str
    sql: str


MIGRATIONS: tuple[Migration, ...] = (
    Migration(
        version=1,
        name="create_users",
        sql="""
            CREATE TABLE IF NOT EXISTS users (
                id TEXT PRIMARY KEY NOT NULL,
                email TEXT NOT NULL UNIQUE,
                hashed_password TEXT NOT NULL,
                display_name TEXT NOT NULL,
                username TEXT NOT NULL UNIQUE,
                age INTEGER,
                reset_key TEXT,
                reset_key_expires TEXT,
                is_banned INTEGER NOT NULL DEFAULT 0,
                last_password_reset TEXT,
                profile_picture_url TEXT,
                created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
                updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
            );

            CREATE INDEX IF NOT EXISTS idx_users_reset_key ON users(reset_key);

            -- Not read or written by any handler yet
            CREATE TABLE IF NOT EXISTS sessions (
                id TEXT PRIMARY KEY NOT NULL,
                user_id TEXT NOT NULL REFERENCES users(id),
                expires_at INTEGER NOT NULL
            );

            CREATE TABLE IF NOT EXISTS verification_tokens (
                id TEXT PRIMARY KEY NOT NULL,
                token TEXT NOT NULL UNIQUE,
                user_id TEXT NOT NULL REFERENCES users(id),
                expires_at INTEGER NOT NULL,
                created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
            );
        """,
    ),
    Migration(
        version=2,
        name="create_settings",
        sql="""
            CREATE TABLE IF NOT EXISTS settings (
                user_email TEXT PRIMARY KEY NOT NULL,
                font_size TEXT NOT NULL DEFAULT 'medium',
                color_theme TEXT NOT NULL DEFAULT 'default',
                dark_mode INTEGER NOT NULL DEFAULT 0,
                reduced_motion INTEGER NOT NULL DEFAULT 0,
                speech_enabled INTEGER NOT NULL DEFAULT 0,
                speech_speed TEXT NOT NULL DEFAULT '1',
                speech_volume TEXT NOT NULL DEFAULT '0.8',
                speech_instructions INTEGER NOT NULL DEFAULT 0,
                reading_guide INTEGER NOT NULL DEFAULT 0,
                text_spacing TEXT NOT NULL DEFAULT 'normal',
                color_overlay TEXT NOT NULL DEFAULT 'none',
                break_reminders INTEGER NOT NULL DEFAULT 0,
                sensory_breaks INTEGER NOT NULL DEFAULT 0,
                simplified_ui INTEGER NOT NULL DEFAULT 0,
                minimal_mode INTEGER NOT NULL DEFAULT 0,
                visible_timers INTEGER NOT NULL DEFAULT 0,
                cognitive_load TEXT NOT NULL DEFAULT 'full',
                error_handling_style TEXT NOT NULL DEFAULT 'standard',
                learning_style TEXT NOT NULL DEFAULT 'visual'
            );
        """,
    ),
    Migration(
        version=3,
        name="extend_settings",
        sql="""
            ALTER TABLE settings ADD COLUMN focus_outlines INTEGER NOT NULL DEFAULT 0;
            ALTER TABLE settings ADD COLUMN audio_feedback INTEGER NOT NULL DEFAULT 0;
            ALTER TABLE settings ADD COLUMN sound_effects INTEGER NOT NULL DEFAULT 0;
            ALTER TABLE settings ADD COLUMN line_height TEXT NOT NULL DEFAULT 'normal';
            ALTER TABLE settings ADD COLUMN word_spacing TEXT NOT NULL DEFAULT 'normal';
            ALTER TABLE settings ADD COLUMN focus_sessions INTEGER NOT NULL DEFAULT 0;
            ALTER TABLE settings ADD COLUMN distraction_reduction INTEGER NOT NULL DEFAULT 0;
            ALTER TABLE settings ADD COLUMN feedback_style TEXT NOT NULL DEFAULT 'mixed';
        """,
    ),
)

LATEST_VERSION = MIGRATIONS[-1].version


class MigrationRunner:
    """
    Apply ``MIGRATIONS`` to a database connection.

    Example:
        >>> runner = MigrationRunner(conn)
        >>> applied = await runner.apply()
        >>> await runner.current_version()
        3
    """

    def __init__(
        self,
        conn: aiosqlite.Connection,
        migrations: tuple[Migration, ...] = MIGRATIONS,
    ) -> None:
        self._conn = conn
        self._migrations = tuple(sorted(migrations, key=lambda m: m.version))

    async def _ensure_table(self) -> None:
        await self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_migrations (
                version INTEGER PRIMARY KEY,
                name TEXT NOT NULL,
                applied_at TEXT NOT NULL
            )
            """
        )
        await self._conn.commit()

    async def applied_versions(self) -> list[int]:
        """Versions already recorded, ascending."""
        await self._ensure_table()
        cursor = await self._conn.execute(
            "SELECT version FROM schema_migrations ORDER BY version"
        )
        return [row[0] for row in await cursor.fetchall()]

    async def current_version(self) -> int:
        versions = await self.applied_versions()
        return versions[-1] if versions else 0

    async def pending(self, target: int | None = None) -> list[Migration]:
        """Migrations not yet applied, up to ``target`` if given."""
        applied = set(await self.applied_versions())
        return [
            m
            for m in self._migrations
            if m.version not in applied and (target is None or m.version <= target)
        ]

    async def apply(self, target: int | None = None) -> list[Migration]:
        """
        Apply pending migrations in order.

        Args:
            target: Stop after this version (default: latest)

        Returns:
            The migrations that were applied
        """
        todo = await self.pending(target)
        for migration in todo:
            logger.info(
                "Applying migration %03d_%s", migration.version, migration.name
            )
            try:
                await self._conn.executescript(migration.sql)
                await self._conn.execute(
                    "INSERT INTO schema_migrations (version, name, applied_at) VALUES (?, ?, ?)",
                    (
                        migration.version,
                        migration.name,
                        datetime.now(timezone.utc).isoformat(),
                    ),
                )
                await self._conn.commit()
            except Exception as e:
                logger.error(
                    "Migration %03d_%s failed: %s", migration.version, migration.name, e
                )
                raise
        return todo
