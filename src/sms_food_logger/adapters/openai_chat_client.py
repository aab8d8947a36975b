"""OpenAI Responses API client for calorie replies."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from sms_food_logger.domain.conversations import ChatMessage
from sms_food_logger.services.nutrition import AIChatClient


@dataclass
class OpenAIChatClient(AIChatClient):
    """Chat client backed by OpenAI Responses API."""

    client: AsyncOpenAI
    model: str

    @classmethod
    def create(
        cls, api_key: str, model: str, timeout_seconds: float = 15.0
    ) -> "OpenAIChatClient":
        """Create an OpenAI chat client that fails fast."""
        return cls(
            client=AsyncOpenAI(
                api_key=api_key, timeout=timeout_seconds, max_retries=0
            ),
            model=model,
        )

    async def complete(
        self,
        *,
        message: str,
        history: list[ChatMessage],
        system_prompt: str,
        context: dict[str, object],
    ) -> str:
        """Call OpenAI with the system prompt as instructions."""
        conversation: list[dict[str, str]] = [
            {"role": entry.role, "content": entry.content} for entry in history
        ]
        conversation.append({"role": "user", "content": message})
        response = await self.client.responses.create(
            model=self.model,
            instructions=system_prompt,
            input=conversation,
            store=False,
        )
        output_text = response.output_text
        if not output_text:
            raise RuntimeError("OpenAI returned an empty response")
        return output_text

    async def close(self) -> None:
        """Close the underlying OpenAI HTTP client."""
        await self.client.close()
