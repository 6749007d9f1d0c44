"""
Gemini Adapter - Chat proxy for the Gemini generateContent endpoint.

This is the ONLY place that calls the Gemini API.
"""

from .client import GeminiProxy, build_contents
from .models import MOCK_REPLY, ChatTurn, GeminiConfig, GeminiReply

__all__ = [
    "GeminiProxy",
    "GeminiConfig",
    "GeminiReply",
    "ChatTurn",
    "MOCK_REPLY",
    "build_contents",
]
