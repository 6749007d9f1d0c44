"""
Identity Domain - Accounts, credentials and profiles.

This domain handles:
- Registration and login
- Profile reads and partial updates
- Email and password changes
- Profile picture uploads
"""

from .contracts import ObjectStorage, UserStore
from .models import AuthResult, ProfileUpdate, User, new_user_id
from .pictures import ProfilePictureService
from .service import IdentityService

__all__ = [
    # Contracts
    "UserStore",
    "ObjectStorage",
    # Models
    "User",
    "AuthResult",
    "ProfileUpdate",
    "new_user_id",
    # Implementations
    "IdentityService",
    "ProfilePictureService",
]
