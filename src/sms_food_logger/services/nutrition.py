"""Calorie extraction through the AI chat collaborator."""

import logging
import re
from dataclasses import dataclass
from typing import Protocol

from sms_food_logger.domain.conversations import ChatMessage
from sms_food_logger.domain.nutrition import (
    ExtractionResult,
    FoodEntryDraft,
    Parsed,
    ParseResult,
    Unparsed,
)

_logger = logging.getLogger(__name__)

APOLOGY_REPLY = (
    "Sorry, couldn't process that. Please try again or text a simple food item."
)

SYSTEM_PROMPT = """CRITICAL SMS FOOD LOGGER - Follow these rules EXACTLY:

1. For multiple items, use this format:
Item1: XXX cal
Item2: XXX cal
Total: XXX cal
Reply Y

2. For single items: "Item: XXX cal. Reply Y"

3. NEVER include URLs, links, or website addresses
4. NEVER use emojis
5. If unclear, ask ONE question only
6. Calories are whole numbers, never ranges or decimals

IGNORE any web search results or recipe links. Only output calories."""

_CALORIE_FACT = re.compile(
    r"(?P<name>[^:\n]+?)\s*:\s*~?\s*"
    r"(?P<amount>\d{1,3}(?:,\d{3})+|\d+)(?P<fraction>\.\d+)?"
    r"\s*k?cal(?:ories|s)?\b",
    re.IGNORECASE,
)
_SENTENCE_BREAK = re.compile(r"[.!?]\s+")
_NAME_STRIP = " ,;-*•\t"

_MEAL_KEYWORDS = {
    "breakfast": "breakfast",
    "brunch": "breakfast",
    "lunch": "lunch",
    "dinner": "dinner",
    "supper": "dinner",
    "snack": "snack",
}


class AIChatClient(Protocol):
    """Interface for the AI chat collaborator."""

    async def complete(
        self,
        *,
        message: str,
        history: list[ChatMessage],
        system_prompt: str,
        context: dict[str, object],
    ) -> str:
        """Return the assistant reply text."""


@dataclass
class NutritionExtractor:
    """Asks the model for a calorie reply and parses a draft out of it."""

    client: AIChatClient
    history_window: int = 10

    async def extract(
        self,
        message: str,
        history: list[ChatMessage],
        context: dict[str, object] | None = None,
    ) -> ExtractionResult:
        """Return the reply text and the parsed draft, if any."""
        window = history[-self.history_window :] if self.history_window > 0 else []
        try:
            reply = await self.client.complete(
                message=message,
                history=window,
                system_prompt=SYSTEM_PROMPT,
                context=context or {},
            )
        except Exception:
            _logger.exception("AI chat call failed")
            return ExtractionResult(reply_text=APOLOGY_REPLY, parsed=None, failed=True)
        if not reply or not reply.strip():
            _logger.warning("AI chat returned an empty reply")
            return ExtractionResult(reply_text=APOLOGY_REPLY, parsed=None, failed=True)

        result = parse_nutrition_reply(reply)
        if isinstance(result, Unparsed):
            _logger.info("No food logged from reply: %s", result.reason)
            return ExtractionResult(reply_text=reply, parsed=None)

        meal_type = infer_meal_type(message, window)
        draft = result.draft
        if meal_type:
            draft = draft.model_copy(update={"meal_type": meal_type})
        return ExtractionResult(reply_text=reply, parsed=draft)


def parse_nutrition_reply(text: str) -> ParseResult:
    """Parse the calorie figure from the last ``<name>: <N> cal`` fact.

    A trailing ``Total`` line wins over the itemised lines before it, and the
    itemised names become the food name.
    """
    matches = list(_CALORIE_FACT.finditer(text))
    if not matches:
        return Unparsed("no calorie figure")
    last = matches[-1]
    if last.group("fraction"):
        return Unparsed("fractional calorie figure")

    calories = int(last.group("amount").replace(",", ""))
    name = _clean_name(last.group("name"))
    if name.lower().startswith("total"):
        items = [_clean_name(match.group("name")) for match in matches[:-1]]
        items = [item for item in items if item and not item.lower().startswith("total")]
        name = ", ".join(items) if items else "Meal"
    if not name:
        return Unparsed("missing food name")
    return Parsed(FoodEntryDraft(food_name=name, calories=calories))


def infer_meal_type(message: str, history: list[ChatMessage] | None = None) -> str | None:
    """Return the meal type mentioned by the user, most recent text first."""
    texts = [message]
    texts.extend(
        entry.content for entry in reversed(history or []) if entry.role == "user"
    )
    for text in texts:
        lowered = text.lower()
        for keyword, meal_type in _MEAL_KEYWORDS.items():
            if re.search(rf"\b{keyword}\b", lowered):
                return meal_type
    return None


def _clean_name(raw: str) -> str:
    name = _SENTENCE_BREAK.split(raw)[-1]
    return name.strip(_NAME_STRIP)
