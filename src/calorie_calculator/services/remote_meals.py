"""Meal records stored on the server."""

from dataclasses import dataclass, replace
from datetime import UTC, date, datetime
from typing import Protocol

from calorie_calculator.domain.models import MEAL_TYPES, NutritionValues
from calorie_calculator.domain.remote import RemoteDailySummary, RemoteMeal
from calorie_calculator.domain.timestamps import day_bounds, parse_timestamp
from calorie_calculator.services.calculator import round_half_up, round_to_tenth
from calorie_calculator.services.catalog import FoodRepository
from calorie_calculator.services.errors import BadRequestError


class MealRepository(Protocol):
    """Persistence interface for server-side meals."""

    def put_meal(self, meal: RemoteMeal) -> None:
        """Create or replace a meal by id."""

    def list_meals(
        self, user_id: str, start: datetime, end: datetime
    ) -> list[RemoteMeal]:
        """Return a user's meals with start <= timestamp < end."""


@dataclass
class RemoteMealService:
    """Stores meals and builds daily summaries."""

    meals: MealRepository
    foods: FoodRepository

    def add_meal(self, payload: dict[str, object]) -> str:
        """Store a meal and return its id.

        A client-supplied id is used as the upsert key, so pushing the same
        meal twice leaves one row.
        """
        user_id = payload.get("userId")
        meal_type = payload.get("mealType")
        if (
            not user_id
            or not payload.get("foodId")
            or not payload.get("amount")
            or not meal_type
        ):
            raise BadRequestError("Required fields are missing")
        if meal_type not in MEAL_TYPES:
            raise BadRequestError(f"mealType must be one of {', '.join(MEAL_TYPES)}")
        now = datetime.now(tz=UTC)
        try:
            timestamp = (
                parse_timestamp(str(payload["timestamp"]))
                if payload.get("timestamp")
                else now
            )
            meal = RemoteMeal(
                id=str(payload.get("id") or f"{user_id}-{int(now.timestamp() * 1000)}"),
                user_id=str(user_id),
                food_id=str(payload["foodId"]),
                food_name=str(payload.get("foodName") or ""),
                amount=float(payload["amount"]),
                meal_type=str(meal_type),
                timestamp=timestamp,
                calories=float(payload.get("calories") or 0),
                protein=float(payload.get("protein") or 0),
                carbs=float(payload.get("carbs") or 0),
                fat=float(payload.get("fat") or 0),
            )
        except (TypeError, ValueError) as exc:
            raise BadRequestError("Meal fields have invalid values") from exc
        self.meals.put_meal(meal)
        return meal.id

    def daily_summary(self, user_id: str, day: str) -> RemoteDailySummary:
        """Return a user's meals for a UTC day with rounded totals.

        Legacy meals stored without nutrition values are filled in from the
        catalogue; meals whose food no longer exists are left out.
        """
        try:
            parsed = date.fromisoformat(day)
        except ValueError as exc:
            raise BadRequestError("A valid date is required") from exc
        start, end = day_bounds(parsed)
        resolved: list[RemoteMeal] = []
        for meal in self.meals.list_meals(user_id, start, end):
            if meal.calories is not None and meal.food_name:
                resolved.append(meal)
                continue
            food = self.foods.get_food(meal.food_id)
            if food is None:
                continue
            multiplier = meal.amount / 100
            resolved.append(
                replace(
                    meal,
                    food_name=food.name,
                    calories=float(round_half_up(food.calories_per_100g * multiplier)),
                    protein=round_to_tenth(food.protein * multiplier),
                    carbs=round_to_tenth(food.carbs * multiplier),
                    fat=round_to_tenth(food.fat * multiplier),
                )
            )
        totals = NutritionValues(
            calories=round_half_up(sum(meal.calories or 0 for meal in resolved)),
            protein=round_to_tenth(sum(meal.protein or 0 for meal in resolved)),
            carbs=round_to_tenth(sum(meal.carbs or 0 for meal in resolved)),
            fat=round_to_tenth(sum(meal.fat or 0 for meal in resolved)),
        )
        return RemoteDailySummary(date=parsed.isoformat(), meals=resolved, totals=totals)
