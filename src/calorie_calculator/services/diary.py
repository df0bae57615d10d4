"""Local food diary backed by the on-device database."""

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import uuid4

from calorie_calculator.domain.models import (
    CUSTOM_FOOD_PREFIX,
    DailySummary,
    Food,
    MealRecord,
    UserSettings,
)
from calorie_calculator.domain.timestamps import day_bounds, parse_day
from calorie_calculator.seed_foods import DEFAULT_FOODS
from calorie_calculator.services.calculator import (
    calculate_nutrition_for_amount,
    calculate_total_nutrition,
)
from calorie_calculator.services.validation import (
    ValidationResult,
    validate_amount,
    validate_custom_food,
    validate_meal_type,
)

logger = logging.getLogger(__name__)

SETTINGS_FIELDS = frozenset(
    {"daily_calorie_goal", "weight", "height", "age", "gender", "activity_level"}
)


class LocalStoreError(RuntimeError):
    """Raised when the on-device database cannot complete an operation."""


class FoodNotFoundError(LookupError):
    """Raised when a food id does not exist locally."""


class DefaultFoodDeletionError(ValueError):
    """Raised when deleting a food that is not user-created."""


class InvalidInputError(ValueError):
    """Raised when a diary write fails validation."""

    def __init__(self, result: ValidationResult) -> None:
        super().__init__(result.format())
        self.result = result


class LocalStore(Protocol):
    """Persistence interface for the device database."""

    def create_schema(self) -> None:
        """Create tables if they do not exist."""

    def count_foods(self) -> int:
        """Return the number of stored foods."""

    def insert_food(self, food: Food) -> None:
        """Insert a food row."""

    def search_foods(self, query: str) -> list[Food]:
        """Return foods whose name contains the query, ordered by name."""

    def get_food(self, food_id: str) -> Food | None:
        """Return a food by id, if present."""

    def delete_food_with_meal_records(self, food_id: str) -> int:
        """Delete a food with its meal records and return the record count."""

    def list_categories(self) -> list[str]:
        """Return distinct food categories in ascending order."""

    def insert_meal_record(self, record: MealRecord) -> None:
        """Insert a meal record row."""

    def list_meal_records(
        self, start: datetime, end: datetime | None = None
    ) -> list[MealRecord]:
        """Return meal records with start <= timestamp < end, oldest first."""

    def delete_meal_record(self, meal_id: str) -> None:
        """Delete a meal record by id."""

    def clear_meal_records(self) -> None:
        """Delete all meal records."""

    def get_latest_settings(self) -> UserSettings | None:
        """Return the most recently updated settings row."""

    def insert_settings(self, settings: UserSettings) -> None:
        """Insert a settings row."""

    def update_latest_settings(self, fields: dict[str, object]) -> None:
        """Update columns on the most recently updated settings row."""

    def delete_settings(self) -> None:
        """Delete every settings row."""


@dataclass
class DiaryService:
    """Reads and writes the local food diary."""

    store: LocalStore

    def initialize(self) -> None:
        """Create tables and seed default foods and settings on first run."""
        try:
            self.store.create_schema()
            if self.store.count_foods() > 0:
                return
            for food in DEFAULT_FOODS:
                self.store.insert_food(food)
            self.store.insert_settings(UserSettings())
        except LocalStoreError as exc:
            logger.exception("Local database initialization failed")
            raise LocalStoreError("Failed to initialize the local database") from exc

    def search_foods(self, query: str) -> list[Food]:
        """Search foods by name substring."""
        return self.store.search_foods(query)

    def get_food(self, food_id: str) -> Food | None:
        """Return a food by id."""
        return self.store.get_food(food_id)

    def get_food_categories(self) -> list[str]:
        """Return the distinct categories of stored foods."""
        return self.store.list_categories()

    def add_custom_food(  # noqa: PLR0913
        self,
        name: str,
        calories_per_100g: float,
        protein: float,
        carbs: float,
        fat: float,
        category: str,
        image_url: str | None = None,
    ) -> Food:
        """Validate and store a user-created food."""
        result = validate_custom_food(
            name, calories_per_100g, protein, carbs, fat, category
        )
        if not result.is_valid:
            raise InvalidInputError(result)
        food = Food(
            id=f"{CUSTOM_FOOD_PREFIX}{uuid4().hex}",
            name=name.strip(),
            calories_per_100g=calories_per_100g,
            protein=protein,
            carbs=carbs,
            fat=fat,
            category=category,
            image_url=image_url,
        )
        self.store.insert_food(food)
        return food

    def delete_food(self, food_id: str) -> int:
        """Delete a custom food and every meal record that references it.

        Returns the number of meal records removed.
        """
        if not food_id.startswith(CUSTOM_FOOD_PREFIX):
            raise DefaultFoodDeletionError("Cannot delete default food")
        if self.store.get_food(food_id) is None:
            raise FoodNotFoundError("Food not found")
        removed = self.store.delete_food_with_meal_records(food_id)
        logger.info(
            "Deleted custom food", extra={"food_id": food_id, "meals_removed": removed}
        )
        return removed

    def log_meal(
        self,
        food: Food,
        amount: float,
        meal_type: str,
        timestamp: datetime | None = None,
    ) -> MealRecord:
        """Snapshot a food portion into a new meal record."""
        result = validate_amount(amount)
        result.extend(validate_meal_type(meal_type))
        if not result.is_valid:
            raise InvalidInputError(result)
        nutrition = calculate_nutrition_for_amount(food, amount)
        record = MealRecord(
            id=new_meal_id(),
            food_id=food.id,
            food_name=food.name,
            amount=amount,
            calories=nutrition.calories,
            protein=nutrition.protein,
            carbs=nutrition.carbs,
            fat=nutrition.fat,
            timestamp=timestamp or datetime.now(tz=UTC),
            meal_type=meal_type,
        )
        self.store.insert_meal_record(record)
        return record

    def add_meal_record(self, record: MealRecord) -> str:
        """Store an already-computed meal record and return its id."""
        self.store.insert_meal_record(record)
        return record.id

    def get_meal_records_by_date(self, day: str | date) -> list[MealRecord]:
        """Return meal records for a UTC day, oldest first."""
        start, end = day_bounds(parse_day(day))
        return self.store.list_meal_records(start, end)

    def get_meal_records_since(self, start: datetime) -> list[MealRecord]:
        """Return meal records at or after a timestamp."""
        return self.store.list_meal_records(start)

    def get_daily_summary(self, day: str | date) -> DailySummary:
        """Return a day's meals summed against the calorie goal."""
        parsed = parse_day(day)
        meals = self.get_meal_records_by_date(parsed)
        settings = self.get_user_settings()
        totals = calculate_total_nutrition(meals)
        return DailySummary(
            date=parsed.isoformat(),
            meals=meals,
            total_calories=totals.calories,
            total_protein=totals.protein,
            total_carbs=totals.carbs,
            total_fat=totals.fat,
            goal_calories=settings.daily_calorie_goal,
        )

    def delete_meal_record(self, meal_id: str) -> None:
        """Delete a meal record by id."""
        self.store.delete_meal_record(meal_id)

    def clear_all_meal_records(self) -> None:
        """Delete every meal record on the device."""
        self.store.clear_meal_records()

    def get_user_settings(self) -> UserSettings:
        """Return the current settings row."""
        settings = self.store.get_latest_settings()
        if settings is None:
            raise LocalStoreError("User settings not found")
        return settings

    def update_user_settings(self, **fields: object) -> None:
        """Update the given settings fields; unset fields keep their value."""
        unknown = set(fields) - SETTINGS_FIELDS
        if unknown:
            raise ValueError(f"Unknown settings fields: {sorted(unknown)}")
        changes = {key: value for key, value in fields.items() if value is not None}
        if not changes:
            return
        if self.store.get_latest_settings() is None:
            self.store.insert_settings(UserSettings())
        self.store.update_latest_settings(changes)

    def reset_user_settings(self) -> None:
        """Replace stored settings with the defaults."""
        self.store.delete_settings()
        self.store.insert_settings(UserSettings())


def new_meal_id() -> str:
    """Return a client-generated meal id, stable across sync."""
    return f"meal_{uuid4().hex}"
