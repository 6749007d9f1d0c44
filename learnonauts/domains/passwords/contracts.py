"""
Password Contracts - Interfaces for the password domain.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .models import MailMessage


@runtime_checkable
class Mailer(Protocol):
    """Contract for outbound mail delivery."""

    async def send(self, message: MailMessage) -> None:
        """
        Deliver a message.

        Raises:
            UpstreamError: The mail transport rejected or failed the send
        """
        ...
