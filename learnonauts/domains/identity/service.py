"""
Identity Service - Registration, login and account maintenance.

Authentication failures are deliberately uniform: an unknown email, a
banned account and a wrong password all produce the same error.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from learnonauts.config import (
    AuthenticationError,
    ConflictError,
    InvalidInputError,
    NotFoundError,
)
from learnonauts.domains.passwords.hashing import PasswordHasher
from learnonauts.domains.tokens import TokenService

from .contracts import UserStore
from .models import AuthResult, ProfileUpdate, User, new_user_id

logger = logging.getLogger(__name__)

__all__ = ["IdentityService", "MIN_PASSWORD_LENGTH"]

MIN_PASSWORD_LENGTH = 6
INVALID_CREDENTIALS = "Invalid email or password"

# Profile columns that may be changed but never cleared
_REQUIRED_PROFILE_FIELDS = (("display_name", "displayName"), ("username", "username"))


class IdentityService:
    """
    Account operations backed by a user store.

    Example:
        >>> identity = IdentityService(repo, PasswordHasher(), TokenService(secret))
        >>> result = await identity.register("ada@example.com", "pw1234", "Ada", "ada")
        >>> result.token
        'eyJhbGciOi...'
    """

    def __init__(
        self,
        store: UserStore,
        hasher: PasswordHasher,
        tokens: TokenService,
    ) -> None:
        self._store = store
        self._hasher = hasher
        self._tokens = tokens

    def _authenticated(self, user: User) -> AuthResult:
        return AuthResult(user=user, token=self._tokens.issue(user.id, user.email))

    async def _require_user(self, user_id: str) -> User:
        row = await self._store.get_user(user_id)
        if row is None:
            raise NotFoundError("User not found")
        return User(**row)

    async def register(
        self,
        email: str | None,
        password: str | None,
        display_name: str | None,
        username: str | None,
        age: int | None = None,
    ) -> AuthResult:
        """
        Create an account and sign the user in.

        Raises:
            InvalidInputError: a required field is missing
            ConflictError: email or username already taken
        """
        if not email or not password or not display_name or not username:
            raise InvalidInputError(
                "Email, password, displayName, and username are required"
            )

        existing = await self._store.find_users_by_email_or_username(email, username)
        if existing:
            field = "email" if existing[0]["email"] == email else "username"
            raise ConflictError(f"{field} already exists")

        hashed = await self._hasher.hash(password)
        row = await self._store.insert_user(
            {
                "id": new_user_id(),
                "email": email,
                "hashed_password": hashed,
                "display_name": display_name,
                "username": username,
                "age": age or None,
            }
        )
        user = User(**row)
        logger.info("Registered user %s", user.id)
        return self._authenticated(user)

    async def login(self, email: str | None, password: str | None) -> AuthResult:
        """
        Check credentials and issue a token.

        Raises:
            InvalidInputError: email or password missing
            AuthenticationError: unknown email, banned account or wrong password
        """
        if not email or not password:
            raise InvalidInputError("Email and password are required")

        row = await self._store.get_user_by_email(email)
        if row is None:
            # Same bcrypt cost as a real check
            await self._hasher.verify_decoy(password)
            raise AuthenticationError(INVALID_CREDENTIALS)

        user = User(**row)
        if not await self._hasher.verify(password, user.hashed_password):
            raise AuthenticationError(INVALID_CREDENTIALS)
        if user.is_banned:
            logger.info("Rejected login for banned user %s", user.id)
            raise AuthenticationError(INVALID_CREDENTIALS)

        return self._authenticated(user)

    async def get_profile(self, user_id: str) -> User:
        """
        Raises:
            NotFoundError: the account no longer exists
        """
        return await self._require_user(user_id)

    async def update_profile(self, user_id: str, update: ProfileUpdate) -> User:
        """
        Apply a partial profile change.

        Raises:
            InvalidInputError: displayName or username set to null or empty
            ConflictError: username belongs to another user
            NotFoundError: the account no longer exists
        """
        changes = update.changes()
        for column, wire in _REQUIRED_PROFILE_FIELDS:
            if column in changes and not changes[column]:
                raise InvalidInputError(f"{wire} cannot be empty", {"field": wire})

        username = changes.get("username")
        if username and await self._store.username_taken(username, exclude_user_id=user_id):
            raise ConflictError("Username already exists")

        row = await self._store.update_user(user_id, changes)
        if row is None:
            raise NotFoundError("User not found")
        return User(**row)

    async def update_email(self, user_id: str, new_email: str | None) -> AuthResult:
        """
        Change the account email and move its settings along with it.

        Returns:
            The updated user and a token carrying the new email

        Raises:
            InvalidInputError: new email missing
            ConflictError: email already taken
            NotFoundError: the account no longer exists
        """
        if not new_email:
            raise InvalidInputError("New email is required")

        if await self._store.get_user_by_email(new_email) is not None:
            raise ConflictError("Email already exists")

        current = await self._require_user(user_id)
        row = await self._store.update_user(user_id, {"email": new_email})
        if row is None:
            raise NotFoundError("User not found")

        moved = await self._store.move_settings(current.email, new_email)
        logger.info("User %s changed email (%d settings rows moved)", user_id, moved)
        return self._authenticated(User(**row))

    async def change_password(
        self,
        user_id: str,
        old_password: str | None,
        new_password: str | None,
        confirm_new_password: str | None,
    ) -> None:
        """
        Replace the password after checking the current one.

        Raises:
            InvalidInputError: missing fields, mismatch, too short or wrong
                old password
            NotFoundError: the account no longer exists
        """
        if not old_password or not new_password or not confirm_new_password:
            raise InvalidInputError(
                "Old password, new password, and confirmation are required"
            )
        if new_password != confirm_new_password:
            raise InvalidInputError("New passwords do not match")
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise InvalidInputError(
                f"New password must be at least {MIN_PASSWORD_LENGTH} characters long"
            )

        user = await self._require_user(user_id)
        if not await self._hasher.verify(old_password, user.hashed_password):
            raise InvalidInputError("Old password is incorrect")

        hashed = await self._hasher.hash(new_password)
        await self._store.update_user(
            user_id,
            {
                "hashed_password": hashed,
                "last_password_reset": datetime.now(timezone.utc).isoformat(),
            },
        )
        logger.info("User %s changed password", user_id)

    async def set_profile_picture(self, user_id: str, url: str) -> User:
        """
        Raises:
            NotFoundError: the account no longer exists
        """
        row = await self._store.update_user(user_id, {"profile_picture_url": url})
        if row is None:
            raise NotFoundError("User not found")
        return User(**row)
