"""Domain models for the calorie calculator."""

from dataclasses import dataclass
from datetime import datetime

MEAL_TYPES = ("breakfast", "lunch", "dinner", "snack")
ACTIVITY_LEVELS = ("sedentary", "light", "moderate", "active", "very_active")
GENDERS = ("male", "female")
CUSTOM_FOOD_PREFIX = "custom_"


@dataclass(frozen=True)
class Food:
    """A food with macros per 100 grams."""

    id: str
    name: str
    calories_per_100g: float
    protein: float
    carbs: float
    fat: float
    category: str
    image_url: str | None = None

    @property
    def is_custom(self) -> bool:
        """Return True for user-created foods."""
        return self.id.startswith(CUSTOM_FOOD_PREFIX)


@dataclass(frozen=True)
class NutritionValues:
    """Calories and macros for a portion or a total."""

    calories: float
    protein: float
    carbs: float
    fat: float


@dataclass(frozen=True)
class MealRecord:
    """Snapshot of an eaten portion; values are not recomputed later."""

    id: str
    food_id: str
    food_name: str
    amount: float
    calories: float
    protein: float
    carbs: float
    fat: float
    timestamp: datetime
    meal_type: str


@dataclass(frozen=True)
class UserSettings:
    """Body profile and calorie goal for the device user."""

    daily_calorie_goal: int = 2000
    weight: float = 70
    height: float = 170
    age: int = 30
    gender: str = "male"
    activity_level: str = "moderate"


@dataclass(frozen=True)
class DailySummary:
    """Meals and totals for a single day."""

    date: str
    meals: list[MealRecord]
    total_calories: float
    total_protein: float
    total_carbs: float
    total_fat: float
    goal_calories: int


@dataclass(frozen=True)
class User:
    """Signed-in or guest identity on the device."""

    id: str
    email: str
    display_name: str
    is_guest: bool = False
    daily_calorie_goal: int | None = None
