"""Request models and JSON serializers for the REST API."""

from pydantic import BaseModel

from calorie_calculator.domain.models import Food
from calorie_calculator.domain.remote import AccountRecord, RemoteMeal
from calorie_calculator.domain.timestamps import format_timestamp


class SignUpRequest(BaseModel):
    """Sign-up payload; presence is checked by the account service."""

    email: str | None = None
    password: str | None = None
    displayName: str | None = None  # noqa: N815


class SignInRequest(BaseModel):
    """Sign-in payload."""

    email: str | None = None
    password: str | None = None


class ChangePasswordRequest(BaseModel):
    """Password change payload."""

    currentPassword: str | None = None  # noqa: N815
    newPassword: str | None = None  # noqa: N815


def account_to_payload(account: AccountRecord) -> dict[str, object]:
    """Serialize an account without its password hash."""
    payload: dict[str, object] = {
        "id": account.id,
        "email": account.email,
        "displayName": account.display_name,
        "dailyCalorieGoal": account.daily_calorie_goal,
        "createdAt": account.created_at.isoformat(),
        "updatedAt": account.updated_at.isoformat(),
    }
    if account.last_login_at:
        payload["lastLoginAt"] = account.last_login_at.isoformat()
    return payload


def food_to_payload(food: Food) -> dict[str, object]:
    """Serialize a catalogue food."""
    payload: dict[str, object] = {
        "id": food.id,
        "name": food.name,
        "caloriesPer100g": food.calories_per_100g,
        "protein": food.protein,
        "carbs": food.carbs,
        "fat": food.fat,
        "category": food.category,
    }
    if food.image_url:
        payload["imageUrl"] = food.image_url
    return payload


def meal_to_payload(meal: RemoteMeal) -> dict[str, object]:
    """Serialize a stored meal."""
    return {
        "id": meal.id,
        "userId": meal.user_id,
        "foodId": meal.food_id,
        "foodName": meal.food_name,
        "amount": meal.amount,
        "calories": meal.calories,
        "protein": meal.protein,
        "carbs": meal.carbs,
        "fat": meal.fat,
        "mealType": meal.meal_type,
        "timestamp": format_timestamp(meal.timestamp),
    }
