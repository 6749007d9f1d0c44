"""
API Routes.
"""

from . import accessibility, account, auth, gemini, health

__all__ = ["health", "auth", "account", "accessibility", "gemini"]
