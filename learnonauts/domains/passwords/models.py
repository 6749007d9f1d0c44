"""
Password Models - Data types for the password lifecycle.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class MailMessage(BaseModel):
    """Outbound email."""

    model_config = ConfigDict(frozen=True)

    to: str
    subject: str
    html: str
    text: str
