"""Shared food catalogue on the server."""

from dataclasses import dataclass
from typing import Protocol

from calorie_calculator.domain.models import Food
from calorie_calculator.seed_foods import DEFAULT_FOODS
from calorie_calculator.services.errors import BadRequestError, NotFoundError

DEFAULT_CATEGORY = "Other"


class FoodRepository(Protocol):
    """Persistence interface for the food catalogue."""

    def search_foods(self, query: str) -> list[Food]:
        """Return foods whose name contains the query."""

    def get_food(self, food_id: str) -> Food | None:
        """Return a food by id, if present."""

    def put_food(self, food: Food) -> None:
        """Create or replace a food."""


@dataclass
class CatalogService:
    """Search and maintain catalogue foods."""

    repository: FoodRepository

    def search(self, query: str | None) -> list[Food]:
        """Substring search over food names."""
        if not query:
            raise BadRequestError("A search query is required")
        return self.repository.search_foods(query)

    def get(self, food_id: str) -> Food:
        """Return a food or raise NotFoundError."""
        food = self.repository.get_food(food_id)
        if food is None:
            raise NotFoundError("Food not found")
        return food

    def add(self, payload: dict[str, object]) -> Food:
        """Create or replace a food from a request body."""
        calories = payload.get("caloriesPer100g")
        if not payload.get("id") or not payload.get("name") or calories is None:
            raise BadRequestError("Required fields are missing")
        try:
            food = Food(
                id=str(payload["id"]),
                name=str(payload["name"]),
                calories_per_100g=float(calories),
                protein=float(payload.get("protein") or 0),
                carbs=float(payload.get("carbs") or 0),
                fat=float(payload.get("fat") or 0),
                category=str(payload.get("category") or DEFAULT_CATEGORY),
                image_url=payload.get("imageUrl") or None,
            )
        except (TypeError, ValueError) as exc:
            raise BadRequestError("Nutrition values must be numbers") from exc
        self.repository.put_food(food)
        return food

    def seed_defaults(self) -> int:
        """Write the default catalogue and return how many foods were written."""
        for food in DEFAULT_FOODS:
            self.repository.put_food(food)
        return len(DEFAULT_FOODS)
