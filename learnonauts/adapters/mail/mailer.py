"""
Mailer - Outbound email delivery.

SmtpMailer sends through an SMTP relay with STARTTLS (or implicit TLS on
port 465). smtplib is blocking, so sends run in a worker thread.
LoggingMailer is used when no SMTP credentials are configured and writes
the message to the log instead.
"""

from __future__ import annotations

import asyncio
import logging
import smtplib
from email.message import EmailMessage

from learnonauts.config import UpstreamError
from learnonauts.domains.passwords.models import MailMessage

logger = logging.getLogger(__name__)

__all__ = ["SmtpMailer", "LoggingMailer"]

_IMPLICIT_TLS_PORT = 465


class SmtpMailer:
    """
    Send mail over SMTP.

    Example:
        >>> mailer = SmtpMailer("smtp.gmail.com", 587, "bot@example.com", "app-password")
        >>> await mailer.send(MailMessage(to="ada@example.com", subject="Hi", html="<p>Hi</p>", text="Hi"))
    """

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        sender: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.host = host
        self.port = port
        self._username = username
        self._password = password
        self.sender = sender or username
        self.timeout = timeout

    def _build(self, message: MailMessage) -> EmailMessage:
        email = EmailMessage()
        email["From"] = self.sender
        email["To"] = message.to
        email["Subject"] = message.subject
        email.set_content(message.text)
        email.add_alternative(message.html, subtype="html")
        return email

    def _send_sync(self, email: EmailMessage) -> None:
        if self.port == _IMPLICIT_TLS_PORT:
            with smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout) as smtp:
                smtp.login(self._username, self._password)
                smtp.send_message(email)
            return

        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            smtp.starttls()
            smtp.login(self._username, self._password)
            smtp.send_message(email)

    async def send(self, message: MailMessage) -> None:
        """
        Deliver a message.

        Raises:
            UpstreamError: connection, authentication or delivery failed
        """
        email = self._build(message)
        try:
            await asyncio.to_thread(self._send_sync, email)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send mail via %s:%s: %s", self.host, self.port, e)
            raise UpstreamError("Failed to send email", {"detail": str(e)}) from e
        logger.info("Sent mail %r", message.subject)


class LoggingMailer:
    """Log messages instead of sending them."""

    async def send(self, message: MailMessage) -> None:
        logger.warning("Email not sent - SMTP credentials not configured")
        logger.info("Mail to %s: %s\n%s", message.to, message.subject, message.text)
