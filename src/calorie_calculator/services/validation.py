"""Input validation for food and meal forms."""

import math
from dataclasses import dataclass, field

from calorie_calculator.domain.models import ACTIVITY_LEVELS, GENDERS, MEAL_TYPES

MAX_FOOD_NAME_LENGTH = 100
MIN_AMOUNT_G = 0.1
MAX_AMOUNT_G = 10000
MAX_CALORIES_PER_100G = 1000
MAX_MACRO_PER_100G = 100


@dataclass(frozen=True)
class ValidationError:
    """A single field-level problem."""

    field: str
    message: str


@dataclass
class ValidationResult:
    """Collected validation errors for a form."""

    errors: list[ValidationError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """Return True when no errors were collected."""
        return not self.errors

    def extend(self, other: "ValidationResult") -> None:
        """Append errors from another result."""
        self.errors.extend(other.errors)

    def format(self) -> str:
        """Join error messages for display."""
        return "\n".join(error.message for error in self.errors)


def _in_range(value: float, low: float, high: float) -> bool:
    return not math.isnan(value) and low <= value <= high


def validate_food_name(name: str | None) -> ValidationResult:
    """Validate a custom food name."""
    result = ValidationResult()
    if not name or not name.strip():
        result.errors.append(ValidationError("name", "Food name is required"))
    elif len(name) > MAX_FOOD_NAME_LENGTH:
        result.errors.append(
            ValidationError(
                "name",
                f"Food name must be between 1 and {MAX_FOOD_NAME_LENGTH} characters",
            )
        )
    return result


def validate_amount(amount: float) -> ValidationResult:
    """Validate an eaten amount in grams."""
    result = ValidationResult()
    if math.isnan(amount):
        result.errors.append(ValidationError("amount", "Enter a valid number"))
    elif not _in_range(amount, MIN_AMOUNT_G, MAX_AMOUNT_G):
        result.errors.append(
            ValidationError(
                "amount",
                f"Amount must be between {MIN_AMOUNT_G} and {MAX_AMOUNT_G} g",
            )
        )
    return result


def validate_meal_type(meal_type: str) -> ValidationResult:
    """Validate a meal type value."""
    result = ValidationResult()
    if meal_type not in MEAL_TYPES:
        result.errors.append(
            ValidationError("meal_type", f"Meal type must be one of {MEAL_TYPES}")
        )
    return result


def validate_custom_food(  # noqa: PLR0913
    name: str | None,
    calories_per_100g: float,
    protein: float,
    carbs: float,
    fat: float,
    category: str | None,
) -> ValidationResult:
    """Validate the fields of a custom food."""
    result = validate_food_name(name)
    if not _in_range(calories_per_100g, 0, MAX_CALORIES_PER_100G):
        result.errors.append(
            ValidationError(
                "calories_per_100g",
                f"Calories must be between 0 and {MAX_CALORIES_PER_100G}",
            )
        )
    for field_name, value in (("protein", protein), ("carbs", carbs), ("fat", fat)):
        if not _in_range(value, 0, MAX_MACRO_PER_100G):
            result.errors.append(
                ValidationError(
                    field_name,
                    f"{field_name.capitalize()} must be between 0 and "
                    f"{MAX_MACRO_PER_100G} g",
                )
            )
    if not category:
        result.errors.append(ValidationError("category", "Category is required"))
    return result


def validate_user_settings(  # noqa: PLR0913
    daily_calorie_goal: float,
    weight: float,
    height: float,
    age: float,
    gender: str,
    activity_level: str,
) -> ValidationResult:
    """Validate a body profile form."""
    result = ValidationResult()
    checks = (
        ("daily_calorie_goal", daily_calorie_goal, 500, 10000, "Calorie goal"),
        ("weight", weight, 20, 300, "Weight"),
        ("height", height, 50, 250, "Height"),
        ("age", age, 1, 120, "Age"),
    )
    for field_name, value, low, high, label in checks:
        if not _in_range(value, low, high):
            result.errors.append(
                ValidationError(field_name, f"{label} must be between {low} and {high}")
            )
    if gender not in GENDERS:
        result.errors.append(ValidationError("gender", "Select a gender"))
    if activity_level not in ACTIVITY_LEVELS:
        result.errors.append(
            ValidationError("activity_level", "Select an activity level")
        )
    return result
