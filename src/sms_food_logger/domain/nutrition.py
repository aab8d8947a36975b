"""Models for calorie extraction results."""

from dataclasses import dataclass

from pydantic import BaseModel, Field

DEFAULT_SMS_CONFIDENCE = 0.85


class FoodEntryDraft(BaseModel):
    """Unconfirmed food entry parsed from an assistant reply."""

    food_name: str
    calories: int = Field(ge=0)
    meal_type: str | None = None
    confidence: float = Field(default=DEFAULT_SMS_CONFIDENCE, ge=0.0, le=1.0)


@dataclass(frozen=True)
class Parsed:
    """Reply matched the calorie contract."""

    draft: FoodEntryDraft


@dataclass(frozen=True)
class Unparsed:
    """Reply did not yield a usable calorie figure."""

    reason: str


ParseResult = Parsed | Unparsed


@dataclass(frozen=True)
class ExtractionResult:
    """Reply to relay to the user plus the draft parsed from it, if any."""

    reply_text: str
    parsed: FoodEntryDraft | None
    failed: bool = False
