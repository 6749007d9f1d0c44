"""
Tests for registration, login and account maintenance.
"""

from __future__ import annotations

import re
from pathlib import Path
from unittest.mock import patch

import pytest

from learnonauts.adapters.sqlite import SQLiteRepository
from learnonauts.config import (
    AuthenticationError,
    ConflictError,
    InvalidInputError,
    NotFoundError,
)
from learnonauts.domains.passwords import PasswordHasher
from learnonauts.domains.tokens import TokenService

from .models import ProfileUpdate, User, new_user_id
from .service import IdentityService

SECRET = "identity-test-secret-that-is-long-enough"


@pytest.fixture
async def repo(tmp_path: Path):
    repo = SQLiteRepository(tmp_path / "identity.db")
    await repo.initialize()
    yield repo
    await repo.close()


@pytest.fixture
def tokens() -> TokenService:
    return TokenService(secret=SECRET)


@pytest.fixture
def identity(repo, tokens) -> IdentityService:
    return IdentityService(repo, PasswordHasher(rounds=4), tokens)


@pytest.fixture
async def ada(identity: IdentityService):
    return await identity.register("ada@example.com", "secret-pw", "Ada", "ada", 12)


# --- Models ---


def test_new_user_id_format() -> None:
    assert re.fullmatch(r"user_\d{13}_[0-9a-f]{9}", new_user_id())


def test_public_view_hides_secrets() -> None:
    user = User(
        id="user_1",
        email="ada@example.com",
        hashed_password="$2b$hash",
        display_name="Ada",
        username="ada",
        reset_key="k",
    )

    public = user.to_public()

    assert public == {
        "id": "user_1",
        "email": "ada@example.com",
        "displayName": "Ada",
        "username": "ada",
        "age": None,
        "profilePictureUrl": None,
    }
    assert set(user.to_profile()) == set(public) | {"isBanned", "createdAt", "updatedAt"}


def test_profile_update_tracks_only_set_fields() -> None:
    assert ProfileUpdate(age=None).changes() == {"age": None}
    assert ProfileUpdate(display_name="Ada").changes() == {"display_name": "Ada"}


# --- Register / login ---


async def test_register_returns_user_and_token(ada, tokens) -> None:
    assert ada.user.email == "ada@example.com"
    assert ada.user.age == 12
    assert ada.user.hashed_password != "secret-pw"
    assert tokens.verify(ada.token).user_id == ada.user.id


async def test_register_requires_fields(identity) -> None:
    with pytest.raises(InvalidInputError):
        await identity.register("ada@example.com", "pw", "", "ada")


async def test_register_duplicate_email(identity, ada, repo) -> None:
    with pytest.raises(ConflictError) as exc:
        await identity.register("ada@example.com", "pw", "Other", "other")

    assert exc.value.message == "email already exists"
    assert await repo.count_users() == 1


async def test_register_duplicate_username(identity, ada, repo) -> None:
    with pytest.raises(ConflictError) as exc:
        await identity.register("other@example.com", "pw", "Other", "ada")

    assert exc.value.message == "username already exists"
    assert await repo.count_users() == 1


async def test_login(identity, ada, tokens) -> None:
    result = await identity.login("ada@example.com", "secret-pw")

    assert result.user.id == ada.user.id
    assert tokens.verify(result.token).email == "ada@example.com"


@pytest.mark.parametrize(
    ("email", "password"),
    [
        ("ada@example.com", "wrong-pw"),
        ("nobody@example.com", "secret-pw"),
    ],
)
async def test_login_failures_are_generic(identity, ada, email, password) -> None:
    with pytest.raises(AuthenticationError) as exc:
        await identity.login(email, password)
    assert exc.value.message == "Invalid email or password"


async def test_login_banned_account_is_generic(identity, ada, repo) -> None:
    await repo.update_user(ada.user.id, {"is_banned": True})

    with pytest.raises(AuthenticationError) as exc:
        await identity.login("ada@example.com", "secret-pw")
    assert exc.value.message == "Invalid email or password"


async def test_login_unknown_email_still_checks_a_hash(repo, tokens) -> None:
    hasher = PasswordHasher(rounds=4)
    identity = IdentityService(repo, hasher, tokens)

    with patch.object(hasher, "verify", wraps=hasher.verify) as verify:
        with pytest.raises(AuthenticationError):
            await identity.login("nobody@example.com", "secret-pw")

    verify.assert_awaited_once()
    assert verify.await_args.args[0] == "secret-pw"


async def test_login_requires_fields(identity) -> None:
    with pytest.raises(InvalidInputError):
        await identity.login("ada@example.com", None)


# --- Profile ---


async def test_get_profile_missing_user(identity) -> None:
    with pytest.raises(NotFoundError):
        await identity.get_profile("user_missing")


async def test_update_profile_partial(identity, ada) -> None:
    updated = await identity.update_profile(ada.user.id, ProfileUpdate(display_name="Countess"))

    assert updated.display_name == "Countess"
    assert updated.username == "ada"
    assert updated.age == 12


async def test_update_profile_username_conflict(identity, ada) -> None:
    await identity.register("bob@example.com", "secret-pw", "Bob", "bob")

    with pytest.raises(ConflictError):
        await identity.update_profile(ada.user.id, ProfileUpdate(username="bob"))


@pytest.mark.parametrize(
    ("update", "field"),
    [
        (ProfileUpdate(display_name=None), "displayName"),
        (ProfileUpdate(username=None), "username"),
        (ProfileUpdate(display_name=""), "displayName"),
    ],
)
async def test_update_profile_rejects_cleared_names(identity, ada, update, field) -> None:
    with pytest.raises(InvalidInputError) as exc:
        await identity.update_profile(ada.user.id, update)

    assert exc.value.details["field"] == field
    assert (await identity.get_profile(ada.user.id)).display_name == "Ada"


async def test_update_profile_keeps_own_username(identity, ada) -> None:
    updated = await identity.update_profile(ada.user.id, ProfileUpdate(username="ada"))
    assert updated.username == "ada"


async def test_update_email_moves_settings_and_reissues_token(identity, ada, repo, tokens) -> None:
    await repo.insert_settings("ada@example.com", {"dark_mode": 1})

    result = await identity.update_email(ada.user.id, "lovelace@example.com")

    assert result.user.email == "lovelace@example.com"
    assert tokens.verify(result.token).email == "lovelace@example.com"
    assert not await repo.settings_exist("ada@example.com")
    assert await repo.settings_exist("lovelace@example.com")


async def test_update_email_taken(identity, ada) -> None:
    await identity.register("bob@example.com", "secret-pw", "Bob", "bob")

    with pytest.raises(ConflictError):
        await identity.update_email(ada.user.id, "bob@example.com")


async def test_update_email_requires_value(identity, ada) -> None:
    with pytest.raises(InvalidInputError):
        await identity.update_email(ada.user.id, "")


# --- Change password ---


async def test_change_password(identity, ada, repo) -> None:
    await identity.change_password(ada.user.id, "secret-pw", "newer-pw", "newer-pw")

    result = await identity.login("ada@example.com", "newer-pw")
    assert result.user.last_password_reset is not None


@pytest.mark.parametrize(
    ("old", "new", "confirm", "message"),
    [
        ("secret-pw", "newer-pw", "other-pw", "New passwords do not match"),
        ("secret-pw", "short", "short", "New password must be at least 6 characters long"),
        ("wrong-pw", "newer-pw", "newer-pw", "Old password is incorrect"),
        ("", "newer-pw", "newer-pw", "Old password, new password, and confirmation are required"),
    ],
)
async def test_change_password_rejections(identity, ada, old, new, confirm, message) -> None:
    with pytest.raises(InvalidInputError) as exc:
        await identity.change_password(ada.user.id, old, new, confirm)
    assert exc.value.message == message


async def test_change_password_missing_user(identity) -> None:
    with pytest.raises(NotFoundError):
        await identity.change_password("user_missing", "secret-pw", "newer-pw", "newer-pw")


async def test_set_profile_picture(identity, ada) -> None:
    user = await identity.set_profile_picture(ada.user.id, "https://cdn.example.com/a.jpg")
    assert user.profile_picture_url == "https://cdn.example.com/a.jpg"
