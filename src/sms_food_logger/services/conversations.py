"""Conversation history storage with per-phone expiry."""

import logging
from dataclasses import dataclass
from typing import Protocol

from sms_food_logger.domain.conversations import ChatMessage, ConversationEntry

_logger = logging.getLogger(__name__)


class ConversationStore(Protocol):
    """Key-value interface for conversation entries keyed by phone."""

    async def get(self, phone: str) -> ConversationEntry | None:
        """Return the stored entry if present and not expired."""

    async def put(self, phone: str, entry: ConversationEntry, ttl_seconds: int) -> None:
        """Overwrite the entry and reset its expiry."""

    async def clear(self, phone: str) -> None:
        """Delete the entry for a phone."""


@dataclass
class ConversationService:
    """Loads and saves conversations, treating store faults as a fresh start."""

    store: ConversationStore
    ttl_seconds: int = 86400
    max_messages: int = 20

    async def load(self, phone: str) -> ConversationEntry:
        """Return the conversation for a phone, or an empty one."""
        try:
            entry = await self.store.get(phone)
        except Exception:
            _logger.exception("Conversation read failed", extra={"phone": phone})
            entry = None
        return entry or ConversationEntry(phone=phone)

    async def save(self, entry: ConversationEntry) -> None:
        """Persist the conversation, keeping only the trailing messages."""
        trimmed = entry.model_copy(
            update={"messages": entry.messages[-self.max_messages :]}
        )
        try:
            await self.store.put(entry.phone, trimmed, self.ttl_seconds)
        except Exception:
            _logger.exception(
                "Conversation write failed", extra={"phone": entry.phone}
            )

    async def clear(self, phone: str) -> None:
        """Drop the conversation for a phone."""
        try:
            await self.store.clear(phone)
        except Exception:
            _logger.exception("Conversation clear failed", extra={"phone": phone})


def record_exchange(
    entry: ConversationEntry, user_text: str, assistant_text: str
) -> ConversationEntry:
    """Return a copy of the entry with one user/assistant exchange appended."""
    messages = [
        *entry.messages,
        ChatMessage(role="user", content=user_text),
        ChatMessage(role="assistant", content=assistant_text),
    ]
    return entry.model_copy(update={"messages": messages})
