"""
Password Reset - Single-use, time-limited reset keys delivered by email.

Flow:
1. request_reset stores a random key and its expiry on the user row and
   mails a link to the frontend's reset page
2. verify_reset_key lets the frontend check the link before showing a form
3. reset_password consumes the key and stores the new hash

Unknown emails are answered exactly like known ones so the endpoint cannot
be used to enumerate accounts.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone

from learnonauts.config import InvalidInputError, ResetKeyError
from learnonauts.domains.identity.contracts import UserStore
from learnonauts.domains.identity.models import User

from .contracts import Mailer
from .hashing import PasswordHasher
from .models import MailMessage

logger = logging.getLogger(__name__)

__all__ = ["PasswordResetService", "RESET_SUBJECT"]

RESET_SUBJECT = "Password Reset Request"

_RESET_HTML = """\
<h2>Password Reset Request</h2>
<p>You have requested to reset your password.</p>
<p>Click the link below to reset your password:</p>
<a href="{url}" style="display: inline-block; padding: 10px 20px; background-color: #3b82f6; color: white; text-decoration: none; border-radius: 5px;">Reset Password</a>
<p>This link will expire in {minutes} minutes.</p>
<p>If you did not request this, please ignore this email.</p>
"""

_RESET_TEXT = """\
You have requested to reset your password.

Open this link to choose a new one:
{url}

This link will expire in {minutes} minutes.
If you did not request this, please ignore this email.
"""


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_expiry(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Unparseable reset key expiry: %r", value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class PasswordResetService:
    """
    Issue, check and consume password reset keys.

    Example:
        >>> service = PasswordResetService(store, hasher, mailer, "https://app.example.com")
        >>> await service.request_reset("ada@example.com")
        >>> user = await service.verify_reset_key(key_from_email)
        >>> await service.reset_password(key_from_email, "new-password")
    """

    def __init__(
        self,
        store: UserStore,
        hasher: PasswordHasher,
        mailer: Mailer,
        frontend_url: str,
        ttl: timedelta = timedelta(hours=1),
    ) -> None:
        self._store = store
        self._hasher = hasher
        self._mailer = mailer
        self._frontend_url = frontend_url.rstrip("/")
        self.ttl = ttl

    def reset_url(self, reset_key: str) -> str:
        return f"{self._frontend_url}/reset-password?key={reset_key}"

    async def request_reset(self, email: str | None) -> None:
        """
        Issue a reset key and mail the link, if the account exists.

        Raises:
            InvalidInputError: email missing
            UpstreamError: the mailer failed to deliver
        """
        if not email:
            raise InvalidInputError("Email is required")

        row = await self._store.get_user_by_email(email)
        if row is None:
            logger.info("Password reset requested for unknown email")
            return

        reset_key = secrets.token_hex(32)
        expires = _now() + self.ttl
        await self._store.update_user(
            row["id"],
            {"reset_key": reset_key, "reset_key_expires": expires.isoformat()},
        )

        url = self.reset_url(reset_key)
        minutes = int(self.ttl.total_seconds() // 60)
        await self._mailer.send(
            MailMessage(
                to=email,
                subject=RESET_SUBJECT,
                html=_RESET_HTML.format(url=url, minutes=minutes),
                text=_RESET_TEXT.format(url=url, minutes=minutes),
            )
        )
        logger.info("Password reset key issued for user %s", row["id"])

    async def resolve_reset_key(self, reset_key: str) -> User:
        """
        Look up the account a reset key belongs to.

        An expired key is cleared from the row before failing, so it can
        never be presented again.

        Raises:
            ResetKeyError: key unknown or expired
        """
        row = await self._store.get_user_by_reset_key(reset_key)
        if row is None:
            raise ResetKeyError("Invalid reset key")

        expires = _parse_expiry(row.get("reset_key_expires"))
        if expires is None or _now() > expires:
            await self._store.update_user(
                row["id"], {"reset_key": None, "reset_key_expires": None}
            )
            logger.info("Cleared expired reset key for user %s", row["id"])
            raise ResetKeyError("Reset key has expired", expired=True)

        return User(**row)

    async def verify_reset_key(self, reset_key: str | None) -> User:
        """
        Check a reset key without consuming it.

        Raises:
            InvalidInputError: key missing
            ResetKeyError: key unknown or expired
        """
        if not reset_key:
            raise InvalidInputError("Reset key is required")
        return await self.resolve_reset_key(reset_key)

    async def reset_password(
        self, reset_key: str | None, new_password: str | None
    ) -> None:
        """
        Consume a reset key and set a new password.

        Raises:
            InvalidInputError: key or password missing
            ResetKeyError: key unknown or expired
        """
        if not reset_key or not new_password:
            raise InvalidInputError("Reset key and new password are required")

        user = await self.resolve_reset_key(reset_key)
        hashed = await self._hasher.hash(new_password)
        await self._store.update_user(
            user.id,
            {
                "hashed_password": hashed,
                "reset_key": None,
                "reset_key_expires": None,
                "last_password_reset": _now().isoformat(),
            },
        )
        logger.info("Password reset completed for user %s", user.id)
