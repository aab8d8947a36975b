"""Food log persistence for confirmed drafts."""

import logging
from dataclasses import dataclass
from typing import Protocol

from sms_food_logger.domain.models import UserRecord
from sms_food_logger.domain.nutrition import FoodEntryDraft

_logger = logging.getLogger(__name__)

DEFAULT_MEAL_TYPE = "snack"


class FoodLogRepository(Protocol):
    """Persistence interface for SMS food logs."""

    def get_user_by_phone(self, phone: str) -> UserRecord | None:
        """Return the user registered with a phone number, if any."""

    def log_food(  # noqa: PLR0913
        self,
        phone: str,
        food_name: str,
        calories: int,
        meal_type: str,
        confidence: float,
    ) -> None:
        """Write one food log row for the phone's user."""


@dataclass
class FoodLogWriter:
    """Commits confirmed drafts for the user behind a phone number."""

    repository: FoodLogRepository

    def write(self, phone: str, draft: FoodEntryDraft) -> bool:
        """Write one food log record and report whether it succeeded."""
        try:
            user = self.repository.get_user_by_phone(phone)
        except Exception:
            _logger.exception(
                "User lookup failed", extra={"phone": phone, "reason": "storage_error"}
            )
            return False
        if user is None:
            _logger.warning(
                "No user registered for phone",
                extra={"phone": phone, "reason": "unknown_user"},
            )
            return False

        try:
            self.repository.log_food(
                phone=phone,
                food_name=draft.food_name,
                calories=draft.calories,
                meal_type=draft.meal_type or DEFAULT_MEAL_TYPE,
                confidence=draft.confidence,
            )
        except Exception:
            _logger.exception(
                "Food log write failed",
                extra={"user_id": str(user.id), "reason": "storage_error"},
            )
            return False
        _logger.info(
            "Food logged via SMS",
            extra={"user_id": str(user.id), "calories": draft.calories},
        )
        return True
