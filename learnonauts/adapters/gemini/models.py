"""
Gemini Models - Request/Response types for the Gemini chat proxy.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

MOCK_REPLY = (
    "This is a mock reply. Configure GEMINI_API_KEY on the server to enable real answers."
)


class GeminiConfig(BaseModel):
    """Configuration for the Gemini proxy."""

    url: str
    api_key: str | None = None
    timeout_seconds: float = Field(default=60.0, gt=0)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    top_k: int = Field(default=40, ge=1)
    top_p: float = Field(default=0.95, ge=0.0, le=1.0)

    model_config = {"frozen": True}


class ChatTurn(BaseModel):
    """One prior message in a conversation, as the frontend sends it."""

    model_config = ConfigDict(extra="ignore")

    role: str = ""
    text: str | None = None


class GeminiReply(BaseModel):
    """Text relayed back to the client."""

    text: str
    mocked: bool = False

    model_config = {"frozen": True}
