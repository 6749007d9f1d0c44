"""
SQLite Adapter - Credential store and schema migrations.
"""

from .migrations import LATEST_VERSION, MIGRATIONS, Migration, MigrationRunner
from .repository import SQLiteRepository

__all__ = [
    "SQLiteRepository",
    "MigrationRunner",
    "Migration",
    "MIGRATIONS",
    "LATEST_VERSION",
]
