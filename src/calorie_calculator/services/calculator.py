"""Pure nutrition and energy calculations."""

import math
from collections.abc import Iterable
from dataclasses import dataclass

from calorie_calculator.domain.models import (
    Food,
    MealRecord,
    NutritionValues,
    UserSettings,
)

ACTIVITY_MULTIPLIERS = {
    "sedentary": 1.2,
    "light": 1.375,
    "moderate": 1.55,
    "active": 1.725,
    "very_active": 1.9,
}

PROTEIN_PER_KG = {
    "sedentary": 0.8,
    "light": 1.0,
    "moderate": 1.2,
    "active": 1.4,
    "very_active": 1.6,
}

PROTEIN_KCAL_PER_G = 4
CARBS_KCAL_PER_G = 4
FAT_KCAL_PER_G = 9

UNDER_TARGET_PERCENT = 90
OVER_TARGET_PERCENT = 110
MAX_PROGRESS_PERCENT = 200


@dataclass(frozen=True)
class MacroBalance:
    """Share of calories contributed by each macronutrient."""

    protein_percentage: int
    carbs_percentage: int
    fat_percentage: int
    protein_grams: float
    carbs_grams: float
    fat_grams: float


@dataclass(frozen=True)
class CalorieProgress:
    """Progress towards the daily calorie goal."""

    percentage: int
    remaining: float
    status: str


@dataclass(frozen=True)
class MacroCheck:
    """Result of comparing a macro balance against healthy ranges."""

    is_healthy: bool
    issues: list[str]


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with exact halves going up."""
    return math.floor(value + 0.5)


def round_to_tenth(value: float) -> float:
    return math.floor(value * 10 + 0.5) / 10


def calculate_nutrition_for_amount(food: Food, grams: float) -> NutritionValues:
    """Scale a food's per-100g values to the given grams.

    Values are rounded to one decimal place. Grams are not validated here.
    """
    ratio = grams / 100
    return NutritionValues(
        calories=round_to_tenth(food.calories_per_100g * ratio),
        protein=round_to_tenth(food.protein * ratio),
        carbs=round_to_tenth(food.carbs * ratio),
        fat=round_to_tenth(food.fat * ratio),
    )


def calculate_bmr(settings: UserSettings) -> float:
    """Return basal metabolic rate using the Harris-Benedict equation."""
    if settings.gender == "male":
        return (
            88.362
            + 13.397 * settings.weight
            + 4.799 * settings.height
            - 5.677 * settings.age
        )
    return (
        447.593
        + 9.247 * settings.weight
        + 3.098 * settings.height
        - 4.330 * settings.age
    )


def calculate_tdee(settings: UserSettings) -> int:
    """Return total daily energy expenditure for the settings' activity level."""
    multiplier = ACTIVITY_MULTIPLIERS[settings.activity_level]
    return round_half_up(calculate_bmr(settings) * multiplier)


def calculate_recommended_calories(settings: UserSettings) -> int:
    """Return the maintenance calorie intake."""
    return calculate_tdee(settings)


def calculate_total_nutrition(meals: Iterable[MealRecord]) -> NutritionValues:
    """Sum calories and macros over meal records."""
    calories = protein = carbs = fat = 0.0
    for meal in meals:
        calories += meal.calories
        protein += meal.protein
        carbs += meal.carbs
        fat += meal.fat
    return NutritionValues(calories=calories, protein=protein, carbs=carbs, fat=fat)


def calculate_calorie_progress(
    current_calories: float, goal_calories: float
) -> CalorieProgress:
    """Return progress towards the goal, capping the displayed percentage."""
    if goal_calories <= 0:
        return CalorieProgress(percentage=0, remaining=0, status="under")
    percentage = round_half_up(current_calories / goal_calories * 100)
    remaining = max(0, goal_calories - current_calories)
    if percentage < UNDER_TARGET_PERCENT:
        status = "under"
    elif percentage <= OVER_TARGET_PERCENT:
        status = "on_target"
    else:
        status = "over"
    return CalorieProgress(
        percentage=min(percentage, MAX_PROGRESS_PERCENT),
        remaining=remaining,
        status=status,
    )


def calculate_macro_balance(nutrition: NutritionValues) -> MacroBalance:
    """Return each macro's share of macro calories.

    Returns zero percentages when there are no macro calories.
    """
    protein_calories = nutrition.protein * PROTEIN_KCAL_PER_G
    carbs_calories = nutrition.carbs * CARBS_KCAL_PER_G
    fat_calories = nutrition.fat * FAT_KCAL_PER_G
    total = protein_calories + carbs_calories + fat_calories
    if total == 0:
        return MacroBalance(0, 0, 0, 0.0, 0.0, 0.0)
    return MacroBalance(
        protein_percentage=round_half_up(protein_calories / total * 100),
        carbs_percentage=round_half_up(carbs_calories / total * 100),
        fat_percentage=round_half_up(fat_calories / total * 100),
        protein_grams=nutrition.protein,
        carbs_grams=nutrition.carbs,
        fat_grams=nutrition.fat,
    )


def get_recommended_macro_distribution() -> dict[str, int]:
    """Return the general-purpose macro split in percent."""
    return {"protein_percentage": 20, "carbs_percentage": 50, "fat_percentage": 30}


def is_macro_balance_healthy(balance: MacroBalance) -> MacroCheck:
    """Flag macros outside the usual healthy ranges."""
    issues: list[str] = []
    if balance.protein_percentage < 15:  # noqa: PLR2004
        issues.append("Protein intake is too low")
    elif balance.protein_percentage > 35:  # noqa: PLR2004
        issues.append("Protein intake is too high")
    if balance.carbs_percentage < 45:  # noqa: PLR2004
        issues.append("Carbohydrate intake is too low")
    elif balance.carbs_percentage > 70:  # noqa: PLR2004
        issues.append("Carbohydrate intake is too high")
    if balance.fat_percentage < 20:  # noqa: PLR2004
        issues.append("Fat intake is too low")
    elif balance.fat_percentage > 40:  # noqa: PLR2004
        issues.append("Fat intake is too high")
    return MacroCheck(is_healthy=not issues, issues=issues)


def calculate_protein_per_kg(total_protein: float, weight: float) -> float:
    """Return grams of protein per kilogram of body weight."""
    if weight <= 0:
        return 0.0
    return round_to_tenth(total_protein / weight)


def get_recommended_protein_per_kg(activity_level: str) -> float:
    """Return recommended protein grams per kilogram for an activity level."""
    return PROTEIN_PER_KG[activity_level]
