"""Tests for SQLite Repository."""

from pathlib import Path

import pytest

from learnonauts.config import ConflictError, SchemaOutdatedError, StorageError

from .repository import SQLiteRepository


def _user(n: int = 1, **overrides) -> dict:
    user = {
        "id": f"user_{n}",
        "email": f"user{n}@example.com",
        "hashed_password": "$2b$10$hash",
        "display_name": f"User {n}",
        "username": f"user{n}",
    }
    user.update(overrides)
    return user


@pytest.fixture
async def repo(tmp_path: Path):
    """Create a test repository with temporary database."""
    repo = SQLiteRepository(tmp_path / "test.db")
    await repo.initialize()
    yield repo
    await repo.close()


@pytest.fixture
async def legacy_repo(tmp_path: Path):
    """Repository whose settings table predates the extended columns."""
    repo = SQLiteRepository(tmp_path / "legacy.db")
    runner = await repo.migrations()
    await runner.apply(target=2)
    yield repo
    await repo.close()


async def test_insert_and_get_user(repo: SQLiteRepository):
    created = await repo.insert_user(_user(age=9))

    assert created["email"] == "user1@example.com"
    assert created["age"] == 9
    assert created["is_banned"] is False
    assert created["created_at"] == created["updated_at"]

    assert (await repo.get_user("user_1"))["username"] == "user1"
    assert (await repo.get_user_by_email("user1@example.com"))["id"] == "user_1"
    assert await repo.get_user("user_missing") is None


async def test_duplicate_email_conflicts(repo: SQLiteRepository):
    await repo.insert_user(_user(1))

    with pytest.raises(ConflictError) as exc:
        await repo.insert_user(_user(2, email="user1@example.com"))
    assert exc.value.message == "email already exists"


async def test_duplicate_username_conflicts(repo: SQLiteRepository):
    await repo.insert_user(_user(1))

    with pytest.raises(ConflictError) as exc:
        await repo.insert_user(_user(2, username="user1"))
    assert exc.value.message == "username already exists"


async def test_find_users_by_email_or_username(repo: SQLiteRepository):
    await repo.insert_user(_user(1))
    await repo.insert_user(_user(2))

    found = await repo.find_users_by_email_or_username("user1@example.com", "user2")

    assert {u["id"] for u in found} == {"user_1", "user_2"}


async def test_username_taken_excludes_self(repo: SQLiteRepository):
    await repo.insert_user(_user(1))

    assert await repo.username_taken("user1") is True
    assert await repo.username_taken("user1", exclude_user_id="user_1") is False
    assert await repo.username_taken("nobody") is False


async def test_update_user(repo: SQLiteRepository):
    await repo.insert_user(_user(1))

    updated = await repo.update_user("user_1", {"display_name": "Ada", "is_banned": 1})

    assert updated["display_name"] == "Ada"
    assert updated["is_banned"] is True
    assert await repo.update_user("user_missing", {"display_name": "x"}) is None


async def test_update_user_rejects_unknown_columns(repo: SQLiteRepository):
    await repo.insert_user(_user(1))

    with pytest.raises(ValueError):
        await repo.update_user("user_1", {"id": "user_2"})


async def test_update_user_email_conflict(repo: SQLiteRepository):
    await repo.insert_user(_user(1))
    await repo.insert_user(_user(2))

    with pytest.raises(ConflictError):
        await repo.update_user("user_2", {"email": "user1@example.com"})


async def test_update_user_not_null_is_not_a_conflict(repo: SQLiteRepository):
    await repo.insert_user(_user(1))

    with pytest.raises(StorageError) as exc:
        await repo.update_user("user_1", {"display_name": None})

    assert not isinstance(exc.value, ConflictError)
    assert "NOT NULL" in exc.value.details["detail"]
    assert (await repo.get_user("user_1"))["display_name"] == "User 1"


async def test_get_user_by_reset_key(repo: SQLiteRepository):
    await repo.insert_user(_user(1, reset_key="abc123"))

    assert (await repo.get_user_by_reset_key("abc123"))["id"] == "user_1"
    assert await repo.get_user_by_reset_key("nope") is None


async def test_settings_insert_update_and_read(repo: SQLiteRepository):
    assert await repo.get_settings("a@example.com", ["dark_mode"]) is None

    await repo.insert_settings("a@example.com", {"dark_mode": 1, "font_size": "large"})
    changed = await repo.update_settings("a@example.com", {"font_size": "small"})

    assert changed == 1
    assert await repo.settings_exist("a@example.com")
    row = await repo.get_settings("a@example.com", ["dark_mode", "font_size", "line_height"])
    assert row == {"dark_mode": 1, "font_size": "small", "line_height": "normal"}


async def test_move_settings(repo: SQLiteRepository):
    await repo.insert_settings("old@example.com", {"dark_mode": 1})

    assert await repo.move_settings("old@example.com", "new@example.com") == 1
    assert not await repo.settings_exist("old@example.com")
    assert (await repo.get_settings("new@example.com", ["dark_mode"]))["dark_mode"] == 1


async def test_invalid_column_name_rejected(repo: SQLiteRepository):
    with pytest.raises(ValueError):
        await repo.get_settings("a@example.com", ["dark_mode; DROP TABLE users"])


async def test_read_missing_column_raises_schema_outdated(legacy_repo: SQLiteRepository):
    with pytest.raises(SchemaOutdatedError) as exc:
        await legacy_repo.get_settings("a@example.com", ["dark_mode", "focus_outlines"])
    assert exc.value.details["column"] == "focus_outlines"


async def test_write_missing_column_raises_schema_outdated(legacy_repo: SQLiteRepository):
    with pytest.raises(SchemaOutdatedError):
        await legacy_repo.insert_settings("a@example.com", {"focus_outlines": 1})

    await legacy_repo.insert_settings("a@example.com", {"dark_mode": 1})
    with pytest.raises(SchemaOutdatedError):
        await legacy_repo.update_settings("a@example.com", {"feedback_style": "visual"})


async def test_initialize_without_auto_migrate_refuses_pending(tmp_path: Path):
    repo = SQLiteRepository(tmp_path / "fresh.db")
    try:
        with pytest.raises(StorageError) as exc:
            await repo.initialize(auto_migrate=False)
        assert "001_create_users" in exc.value.details["pending_migrations"]
    finally:
        await repo.close()


async def test_initialize_without_auto_migrate_accepts_current(tmp_path: Path):
    db_path = tmp_path / "current.db"
    first = SQLiteRepository(db_path)
    await first.initialize()
    await first.close()

    second = SQLiteRepository(db_path)
    await second.initialize(auto_migrate=False)
    assert await second.count_users() == 0
    await second.close()
