"""SMS gateway: one inbound message in, exactly one reply out."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

from sms_food_logger.adapters.twilio_client import SmsClient
from sms_food_logger.domain.nutrition import FoodEntryDraft
from sms_food_logger.services.confirmation import (
    Commit,
    after_extraction,
    apply_state,
    next_transition,
    state_of,
)
from sms_food_logger.services.conversations import (
    ConversationService,
    record_exchange,
)
from sms_food_logger.services.food_log import FoodLogWriter
from sms_food_logger.services.nutrition import APOLOGY_REPLY, NutritionExtractor
from sms_food_logger.services.sms_text import compose_sms_reply, normalize_phone

_logger = logging.getLogger(__name__)

EMPTY_MESSAGE_REPLY = "Sorry, I didn't receive your message. Please try again!"
LOG_FAILED_REPLY = "Sorry, couldn't log that. Reply Y to try again."


@dataclass
class PhoneLocks:
    """Per-phone asyncio locks, dropped once nobody is waiting."""

    _locks: dict[str, asyncio.Lock] = field(default_factory=dict)
    _holders: dict[str, int] = field(default_factory=dict)

    @asynccontextmanager
    async def hold(self, phone: str) -> AsyncIterator[None]:
        """Serialize message handling for a single phone."""
        lock = self._locks.setdefault(phone, asyncio.Lock())
        self._holders[phone] = self._holders.get(phone, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[phone] -= 1
            if not self._holders[phone]:
                del self._holders[phone]
                self._locks.pop(phone, None)

    def __len__(self) -> int:
        return len(self._locks)


@dataclass
class SmsGateway:
    """Orchestrates conversation state, extraction, and food logging."""

    conversation_service: ConversationService
    extractor: NutritionExtractor
    food_log_writer: FoodLogWriter
    sms_client: SmsClient
    service_numbers: set[str] = field(default_factory=set)
    max_length: int = 140
    locks: PhoneLocks = field(default_factory=PhoneLocks)

    def is_service_number(self, phone: str) -> bool:
        """Return true for the service's own outbound numbers."""
        normalized = normalize_phone(phone)
        return any(normalized == normalize_phone(own) for own in self.service_numbers)

    async def handle(self, phone: str, body: str) -> str | None:
        """Return the SMS reply for an inbound message.

        Returns None only for messages sent from the service's own numbers,
        which are delivery echoes and must not be answered.
        """
        if self.is_service_number(phone):
            _logger.info("Ignoring message from service number", extra={"phone": phone})
            return None
        resolved_phone = normalize_phone(phone) or phone
        try:
            async with self.locks.hold(resolved_phone):
                reply = await self._process(resolved_phone, body)
        except Exception:
            _logger.exception("Failed to handle inbound SMS", extra={"phone": phone})
            reply = APOLOGY_REPLY
        return compose_sms_reply(reply, self.max_length)

    async def send_reply(self, phone: str, text: str) -> None:
        """Send the reply to the sender's E.164 number."""
        await self.sms_client.send_message(to=normalize_phone(phone) or phone, body=text)

    async def _process(self, phone: str, body: str) -> str:
        text = body.strip()
        if not text:
            return EMPTY_MESSAGE_REPLY

        entry = await self.conversation_service.load(phone)
        transition = next_transition(state_of(entry), text)
        if isinstance(transition, Commit):
            return await self._commit(phone, transition.draft)

        result = await self.extractor.extract(
            text,
            entry.messages,
            context={"source": "sms", "phone": phone, "personality": "food-logger"},
        )
        updated = apply_state(entry, after_extraction(result))
        if not result.failed:
            updated = record_exchange(updated, text, result.reply_text)
        await self.conversation_service.save(updated)
        return result.reply_text

    async def _commit(self, phone: str, draft: FoodEntryDraft) -> str:
        # Supabase RPCs are blocking; keep other phones moving meanwhile.
        if not await asyncio.to_thread(self.food_log_writer.write, phone, draft):
            return LOG_FAILED_REPLY
        await self.conversation_service.clear(phone)
        return f"Logged: {draft.food_name} ({draft.calories} cal)"
