"""
Passwords Domain - Hashing and the reset-key lifecycle.

This domain handles:
- bcrypt hashing and verification
- Reset key issue, lookup and consumption
- The outbound mail contract
"""

from .hashing import PasswordHasher
from .contracts import Mailer
from .models import MailMessage
from .reset import PasswordResetService

__all__ = [
    # Contracts
    "Mailer",
    # Models
    "MailMessage",
    # Implementations
    "PasswordHasher",
    "PasswordResetService",
]
