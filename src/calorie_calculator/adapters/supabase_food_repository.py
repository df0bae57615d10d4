"""Supabase repository for the food catalogue."""

from dataclasses import dataclass

from supabase import Client

from calorie_calculator.domain.models import Food
from calorie_calculator.services.catalog import FoodRepository

_COLUMNS = "id, name, calories_per_100g, protein, carbs, fat, category, image_url"


@dataclass
class SupabaseFoodRepository(FoodRepository):
    """Supabase implementation for catalogue foods."""

    client: Client

    def search_foods(self, query: str) -> list[Food]:
        """Return foods whose name contains the query."""
        response = (
            self.client.table("foods")
            .select(_COLUMNS)
            .ilike("name", f"%{query}%")
            .order("name", desc=False)
            .execute()
        )
        return [_parse_food(row) for row in response.data or []]

    def get_food(self, food_id: str) -> Food | None:
        """Return a food by id."""
        response = (
            self.client.table("foods")
            .select(_COLUMNS)
            .eq("id", food_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_food(response.data[0])

    def put_food(self, food: Food) -> None:
        """Insert or replace a food row."""
        self.client.table("foods").upsert(
            {
                "id": food.id,
                "name": food.name,
                "calories_per_100g": food.calories_per_100g,
                "protein": food.protein,
                "carbs": food.carbs,
                "fat": food.fat,
                "category": food.category,
                "image_url": food.image_url,
            }
        ).execute()


def _parse_food(row: dict[str, object]) -> Food:
    return Food(
        id=str(row["id"]),
        name=str(row["name"]),
        calories_per_100g=float(row.get("calories_per_100g") or 0.0),
        protein=float(row.get("protein") or 0.0),
        carbs=float(row.get("carbs") or 0.0),
        fat=float(row.get("fat") or 0.0),
        category=str(row.get("category") or ""),
        image_url=row.get("image_url"),
    )
