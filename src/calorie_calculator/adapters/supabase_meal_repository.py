"""Supabase repository for server-side meals."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from calorie_calculator.domain.remote import RemoteMeal
from calorie_calculator.domain.timestamps import format_timestamp, parse_timestamp
from calorie_calculator.services.remote_meals import MealRepository

_COLUMNS = (
    "id, user_id, food_id, food_name, amount, calories, protein, carbs, fat, "
    "meal_type, timestamp"
)


@dataclass
class SupabaseMealRepository(MealRepository):
    """Supabase implementation for meals."""

    client: Client

    def put_meal(self, meal: RemoteMeal) -> None:
        """Insert or replace a meal row by id."""
        self.client.table("meals").upsert(
            {
                "id": meal.id,
                "user_id": meal.user_id,
                "food_id": meal.food_id,
                "food_name": meal.food_name,
                "amount": meal.amount,
                "calories": meal.calories,
                "protein": meal.protein,
                "carbs": meal.carbs,
                "fat": meal.fat,
                "meal_type": meal.meal_type,
                "timestamp": format_timestamp(meal.timestamp),
                "created_at": datetime.now(tz=UTC).isoformat(),
            }
        ).execute()

    def list_meals(
        self, user_id: str, start: datetime, end: datetime
    ) -> list[RemoteMeal]:
        """Return a user's meals in [start, end)."""
        response = (
            self.client.table("meals")
            .select(_COLUMNS)
            .eq("user_id", user_id)
            .gte("timestamp", format_timestamp(start))
            .lt("timestamp", format_timestamp(end))
            .order("timestamp", desc=False)
            .execute()
        )
        return [_parse_meal(row) for row in response.data or []]


def _optional_float(value: object) -> float | None:
    return None if value is None else float(value)


def _parse_meal(row: dict[str, object]) -> RemoteMeal:
    return RemoteMeal(
        id=str(row["id"]),
        user_id=str(row["user_id"]),
        food_id=str(row["food_id"]),
        food_name=str(row.get("food_name") or ""),
        amount=float(row.get("amount") or 0.0),
        meal_type=str(row.get("meal_type") or ""),
        timestamp=parse_timestamp(str(row["timestamp"])),
        calories=_optional_float(row.get("calories")),
        protein=_optional_float(row.get("protein")),
        carbs=_optional_float(row.get("carbs")),
        fat=_optional_float(row.get("fat")),
    )
