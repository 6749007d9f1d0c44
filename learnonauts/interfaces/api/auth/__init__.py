"""
Authentication - Bearer session tokens issued at register/login.
"""

from .deps import get_current_user

__all__ = ["get_current_user"]
