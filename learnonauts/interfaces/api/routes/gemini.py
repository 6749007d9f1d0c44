"""
Gemini Routes - Authenticated chat proxy.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from learnonauts.adapters.gemini import ChatTurn, GeminiProxy
from learnonauts.domains.tokens import TokenClaims
from learnonauts.interfaces.api.auth import get_current_user
from learnonauts.interfaces.api.deps import get_gemini_proxy

router = APIRouter()


class ChatRequest(BaseModel):
    """Chat message with optional prior turns."""

    message: str | None = None
    history: list[ChatTurn] | None = None


@router.post("")
async def chat(
    request: ChatRequest,
    user: TokenClaims = Depends(get_current_user),
    proxy: GeminiProxy = Depends(get_gemini_proxy),
) -> dict[str, str]:
    reply = await proxy.chat(request.message, request.history or [])
    return {"text": reply.text}
