"""Redis-backed conversation store."""

import logging
from dataclasses import dataclass

from pydantic import ValidationError
from redis.asyncio import Redis

from sms_food_logger.domain.conversations import ConversationEntry
from sms_food_logger.services.conversations import ConversationStore

_logger = logging.getLogger(__name__)

KEY_PREFIX = "sms:"


@dataclass
class RedisConversationStore(ConversationStore):
    """Conversation store relying on Redis key expiry."""

    client: Redis

    @classmethod
    def create(cls, url: str, timeout_seconds: float) -> "RedisConversationStore":
        """Create a store with fail-fast socket timeouts."""
        client = Redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=timeout_seconds,
            socket_connect_timeout=timeout_seconds,
        )
        return cls(client=client)

    async def get(self, phone: str) -> ConversationEntry | None:
        """Return the stored entry, or None when missing or unreadable."""
        raw = await self.client.get(_key(phone))
        if raw is None:
            return None
        try:
            return ConversationEntry.model_validate_json(raw)
        except ValidationError:
            _logger.warning("Discarding unreadable conversation", extra={"phone": phone})
            return None

    async def put(self, phone: str, entry: ConversationEntry, ttl_seconds: int) -> None:
        """Write the entry with SETEX so expiry resets on every write."""
        await self.client.setex(_key(phone), ttl_seconds, entry.model_dump_json())

    async def clear(self, phone: str) -> None:
        """Delete the entry for a phone."""
        await self.client.delete(_key(phone))

    async def close(self) -> None:
        """Close the underlying connection pool."""
        await self.client.aclose()


def _key(phone: str) -> str:
    return f"{KEY_PREFIX}{phone}"
