"""
Learnonauts - Authentication, accessibility settings and AI proxy backend.

Example:
    >>> from learnonauts.domains.tokens import TokenService
    >>> tokens = TokenService(secret="change-me")
    >>> claims = tokens.verify(tokens.issue("user_1", "ada@example.com"))
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
