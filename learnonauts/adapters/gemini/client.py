"""
Gemini Proxy - Forward an authenticated chat message to Gemini generateContent.

Features:
- Chat history re-labelled to Gemini roles (assistant -> model)
- Fixed generation settings
- Mock replies when no API key is configured
- Upstream failures surfaced as UpstreamError with the provider's detail
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

import httpx

from learnonauts.config import InvalidInputError, UpstreamError

from .models import MOCK_REPLY, ChatTurn, GeminiConfig, GeminiReply

logger = logging.getLogger(__name__)

__all__ = ["GeminiProxy", "build_contents"]

_ROLES = {"user": "user", "assistant": "model"}


def build_contents(message: str, history: Sequence[ChatTurn]) -> list[dict[str, Any]]:
    """
    Build the ``contents`` array for a chat request.

    Turns with roles other than user/assistant are dropped. The current
    message is appended unless the frontend already put it at the end of
    the history.
    """
    contents = [
        {"role": _ROLES[turn.role], "parts": [{"text": turn.text or ""}]}
        for turn in history
        if turn.role in _ROLES
    ]
    if not history or history[-1].text != message:
        contents.append({"role": "user", "parts": [{"text": message}]})
    return contents


class GeminiProxy:
    """
    Stateless Gemini chat proxy over httpx.

    Example:
        >>> proxy = GeminiProxy(GeminiConfig(url=GEMINI_GENERATE_URL, api_key="..."))
        >>> reply = await proxy.chat("What is photosynthesis?", history=[])
        >>> print(reply.text)
    """

    def __init__(
        self,
        config: GeminiConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the proxy.

        Args:
            config: Endpoint, key and generation settings
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.config = config
        self._transport = transport
        if not config.api_key:
            logger.warning("GEMINI_API_KEY is not set; /api/gemini will return a mock")

    @property
    def configured(self) -> bool:
        return bool(self.config.api_key)

    def _body(self, contents: list[dict[str, Any]]) -> dict[str, Any]:
        return {
            "contents": contents,
            "generationConfig": {
                "temperature": self.config.temperature,
                "topK": self.config.top_k,
                "topP": self.config.top_p,
            },
        }

    async def chat(
        self, message: str | None, history: Sequence[ChatTurn] = ()
    ) -> GeminiReply:
        """
        Send a message (plus prior turns) and return the model's text.

        Raises:
            InvalidInputError: message missing
            UpstreamError: transport failure, non-2xx status, no candidates
                or a candidate without text
        """
        if not message:
            raise InvalidInputError("Message is required")

        if not self.configured:
            return GeminiReply(text=MOCK_REPLY, mocked=True)

        contents = build_contents(message, history)
        logger.info("Sending Gemini request with %d messages", len(contents))

        try:
            async with httpx.AsyncClient(
                timeout=self.config.timeout_seconds, transport=self._transport
            ) as client:
                response = await client.post(
                    self.config.url,
                    params={"key": self.config.api_key},
                    headers={"Content-Type": "application/json"},
                    json=self._body(contents),
                )
        except httpx.HTTPError as e:
            logger.error("Gemini request failed: %s", e)
            raise UpstreamError("Gemini request failed", {"detail": str(e)}) from e

        if not response.is_success:
            logger.error(
                "Gemini request failed with status %s: %s",
                response.status_code,
                response.text,
            )
            raise UpstreamError(
                "Gemini request failed",
                {"status": response.status_code, "detail": response.text},
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(
                "Gemini request failed",
                {"status": response.status_code, "detail": response.text},
            ) from e

        candidates = data.get("candidates") if isinstance(data, dict) else None
        if not candidates:
            logger.error("No candidates returned from Gemini: %s", data)
            raise UpstreamError("No response from Gemini API", {"detail": data})

        parts = (candidates[0].get("content") or {}).get("parts") or []
        text = parts[0].get("text", "") if parts else ""
        if not text:
            logger.error("No text returned from Gemini: %s", data)
            raise UpstreamError("Empty response from Gemini API", {"detail": data})

        return GeminiReply(text=text)
