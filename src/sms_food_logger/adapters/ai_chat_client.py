"""HTTP client for the shared AI chat backend."""

from dataclasses import dataclass

import httpx

from sms_food_logger.domain.conversations import ChatMessage
from sms_food_logger.services.nutrition import AIChatClient

CHAT_PATH = "/api/ai/chat"


@dataclass
class HttpxAIChatClient(AIChatClient):
    """Relays SMS text to the AI chat endpoint the mobile app also uses."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 15.0

    @classmethod
    def create(cls, base_url: str, timeout_seconds: float = 15.0) -> "HttpxAIChatClient":
        """Create a chat client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def complete(
        self,
        *,
        message: str,
        history: list[ChatMessage],
        system_prompt: str,
        context: dict[str, object],
    ) -> str:
        """POST the message and return the ``response`` or ``message`` field."""
        payload: dict[str, object] = {
            "message": message,
            "conversationHistory": [entry.model_dump() for entry in history],
            "context": {**context, "systemPrompt": system_prompt},
        }
        response = await self.http_client.post(
            f"{self.base_url}{CHAT_PATH}", json=payload, timeout=self.timeout_seconds
        )
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise RuntimeError("AI chat returned a non-object payload")
        reply = data.get("response") or data.get("message")
        if not isinstance(reply, str) or not reply.strip():
            raise RuntimeError("AI chat returned an empty response")
        return reply

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()
