"""In-memory conversation store."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from sms_food_logger.domain.conversations import ConversationEntry
from sms_food_logger.services.conversations import ConversationStore


@dataclass
class _StoredConversation:
    payload: str
    expires_at: datetime


@dataclass
class InMemoryConversationStore(ConversationStore):
    """Process-local store for single-instance deployments."""

    _entries: dict[str, _StoredConversation]

    def __init__(self) -> None:
        self._entries = {}

    async def get(self, phone: str) -> ConversationEntry | None:
        """Return the entry if it hasn't expired."""
        stored = self._entries.get(phone)
        if stored is None:
            return None
        if datetime.now(tz=UTC) >= stored.expires_at:
            self._entries.pop(phone, None)
            return None
        return ConversationEntry.model_validate_json(stored.payload)

    async def put(self, phone: str, entry: ConversationEntry, ttl_seconds: int) -> None:
        """Store a serialized copy so callers can't mutate stored state."""
        now = datetime.now(tz=UTC)
        self._purge_expired(now)
        expires_at = now + timedelta(seconds=ttl_seconds)
        self._entries[phone] = _StoredConversation(
            payload=entry.model_dump_json(), expires_at=expires_at
        )

    async def clear(self, phone: str) -> None:
        """Delete the entry for a phone."""
        self._entries.pop(phone, None)

    def __len__(self) -> int:
        return len(self._entries)

    def _purge_expired(self, now: datetime) -> None:
        # Phones that never text again would otherwise stay here forever.
        expired = [
            phone
            for phone, stored in self._entries.items()
            if now >= stored.expires_at
        ]
        for phone in expired:
            del self._entries[phone]
