"""Supabase RPC-backed food log repository."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from sms_food_logger.domain.models import UserRecord
from sms_food_logger.services.food_log import FoodLogRepository


@dataclass
class SupabaseFoodLogRepository(FoodLogRepository):
    """Supabase implementation using the SMS logging RPCs."""

    client: Client

    def get_user_by_phone(self, phone: str) -> UserRecord | None:
        """Resolve a user with the get_user_by_phone RPC."""
        response = self.client.rpc("get_user_by_phone", {"phone_input": phone}).execute()
        rows = response.data
        if isinstance(rows, dict):
            rows = [rows]
        if not rows:
            return None
        row = rows[0]
        user_id = row.get("id") or row.get("user_id")
        if not user_id:
            return None
        return UserRecord(id=UUID(str(user_id)), phone=phone)

    def log_food(  # noqa: PLR0913
        self,
        phone: str,
        food_name: str,
        calories: int,
        meal_type: str,
        confidence: float,
    ) -> None:
        """Write a food log row with the log_food_via_sms RPC."""
        self.client.rpc(
            "log_food_via_sms",
            {
                "phone_input": phone,
                "food_name_input": food_name,
                "calories_input": calories,
                "meal_type_input": meal_type,
                "confidence_input": confidence,
            },
        ).execute()
