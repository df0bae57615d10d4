"""Domain models for the server-side tables."""

from dataclasses import dataclass
from datetime import datetime

from calorie_calculator.domain.models import NutritionValues


@dataclass(frozen=True)
class AccountRecord:
    """A registered account with its password hash."""

    id: str
    email: str
    display_name: str
    password_hash: str
    daily_calorie_goal: int
    created_at: datetime
    updated_at: datetime
    last_login_at: datetime | None = None


@dataclass(frozen=True)
class RemoteMeal:
    """A meal stored for an account.

    Nutrition values are None for legacy rows that only stored the food id.
    """

    id: str
    user_id: str
    food_id: str
    food_name: str
    amount: float
    meal_type: str
    timestamp: datetime
    calories: float | None = None
    protein: float | None = None
    carbs: float | None = None
    fat: float | None = None


@dataclass(frozen=True)
class RemoteDailySummary:
    """Meals and rounded totals for one account and day."""

    date: str
    meals: list[RemoteMeal]
    totals: NutritionValues
