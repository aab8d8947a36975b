"""Models for per-phone SMS conversations."""

from typing import Literal

from pydantic import BaseModel, Field

from sms_food_logger.domain.nutrition import FoodEntryDraft


class ChatMessage(BaseModel):
    """Single message exchanged with the user."""

    role: Literal["user", "assistant"]
    content: str


class ConversationEntry(BaseModel):
    """Recent exchange history for a phone number."""

    phone: str
    messages: list[ChatMessage] = Field(default_factory=list)
    pending_food_entry: FoodEntryDraft | None = None
