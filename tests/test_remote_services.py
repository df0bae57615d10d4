"""Tests for the catalogue, meal and settings services behind the API."""

from datetime import UTC, datetime

import pytest

from calorie_calculator.domain.models import Food
from calorie_calculator.domain.remote import RemoteMeal
from calorie_calculator.seed_foods import DEFAULT_FOODS
from calorie_calculator.services.catalog import CatalogService
from calorie_calculator.services.errors import BadRequestError, NotFoundError
from calorie_calculator.services.remote_meals import RemoteMealService
from calorie_calculator.services.remote_settings import RemoteSettingsService
from tests.conftest import (
    InMemoryFoodRepository,
    InMemoryMealRepository,
    InMemorySettingsRepository,
)


@pytest.fixture
def catalog(food_repository: InMemoryFoodRepository) -> CatalogService:
    service = CatalogService(food_repository)
    service.seed_defaults()
    return service


@pytest.fixture
def meal_service(
    meal_repository: InMemoryMealRepository,
    food_repository: InMemoryFoodRepository,
    catalog: CatalogService,
) -> RemoteMealService:
    return RemoteMealService(meals=meal_repository, foods=food_repository)


def _meal_payload(**overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "id": "meal_1",
        "userId": "user-1",
        "foodId": "food-001",
        "foodName": "White rice (cooked)",
        "amount": 150,
        "calories": 252,
        "protein": 3.8,
        "carbs": 55.7,
        "fat": 0.5,
        "mealType": "lunch",
        "timestamp": "2024-05-01T12:00:00.000Z",
    }
    payload.update(overrides)
    return payload


def test_seed_defaults_writes_catalogue(
    food_repository: InMemoryFoodRepository,
) -> None:
    written = CatalogService(food_repository).seed_defaults()

    assert written == len(DEFAULT_FOODS)
    assert len(food_repository.foods) == len(DEFAULT_FOODS)


def test_search_requires_query(catalog: CatalogService) -> None:
    with pytest.raises(BadRequestError, match="search query"):
        catalog.search("")

    assert [food.name for food in catalog.search("Apple")] == ["Apple"]


def test_get_unknown_food(catalog: CatalogService) -> None:
    with pytest.raises(NotFoundError):
        catalog.get("food-999")


def test_add_food_defaults_and_validation(catalog: CatalogService) -> None:
    food = catalog.add({"id": "food-100", "name": "Kiwi", "caloriesPer100g": 61})

    assert food.protein == 0
    assert food.category == "Other"
    assert catalog.get("food-100") == food
    with pytest.raises(BadRequestError, match="Required fields"):
        catalog.add({"id": "food-101", "name": "Fig"})
    with pytest.raises(BadRequestError, match="numbers"):
        catalog.add({"id": "food-102", "name": "Fig", "caloriesPer100g": "lots"})


def test_add_meal_requires_fields(meal_service: RemoteMealService) -> None:
    with pytest.raises(BadRequestError, match="Required fields are missing"):
        meal_service.add_meal(_meal_payload(userId=None))
    with pytest.raises(BadRequestError, match="mealType"):
        meal_service.add_meal(_meal_payload(mealType="brunch"))


def test_add_meal_upserts_by_client_id(
    meal_service: RemoteMealService, meal_repository: InMemoryMealRepository
) -> None:
    first = meal_service.add_meal(_meal_payload())
    second = meal_service.add_meal(_meal_payload(amount=200))

    assert first == second == "meal_1"
    assert len(meal_repository.meals) == 1
    assert meal_repository.meals["meal_1"].amount == 200


def test_add_meal_generates_id_without_client_id(
    meal_service: RemoteMealService,
) -> None:
    meal_id = meal_service.add_meal(_meal_payload(id=None))

    assert meal_id.startswith("user-1-")


def test_daily_summary_rounds_totals(meal_service: RemoteMealService) -> None:
    meal_service.add_meal(_meal_payload())
    meal_service.add_meal(
        _meal_payload(id="meal_2", calories=100.6, protein=1.26, carbs=0, fat=0)
    )
    meal_service.add_meal(
        _meal_payload(id="meal_3", timestamp="2024-05-02T00:00:00.000Z")
    )
    meal_service.add_meal(_meal_payload(id="meal_4", userId="user-2"))

    summary = meal_service.daily_summary("user-1", "2024-05-01")

    assert [meal.id for meal in summary.meals] == ["meal_1", "meal_2"]
    assert summary.totals.calories == 353
    assert summary.totals.protein == 5.1


def test_daily_summary_fills_legacy_meals_from_catalogue(
    meal_service: RemoteMealService, meal_repository: InMemoryMealRepository
) -> None:
    meal_repository.put_meal(
        RemoteMeal(
            id="legacy",
            user_id="user-1",
            food_id="food-003",
            food_name="",
            amount=200,
            meal_type="snack",
            timestamp=datetime(2024, 5, 1, 9, tzinfo=UTC),
        )
    )
    meal_repository.put_meal(
        RemoteMeal(
            id="orphan",
            user_id="user-1",
            food_id="food-999",
            food_name="",
            amount=100,
            meal_type="snack",
            timestamp=datetime(2024, 5, 1, 10, tzinfo=UTC),
        )
    )

    summary = meal_service.daily_summary("user-1", "2024-05-01")

    (meal,) = summary.meals
    assert meal.food_name == "Apple"
    assert meal.calories == 108
    assert summary.totals.carbs == 29.2


def test_daily_summary_rejects_bad_date(meal_service: RemoteMealService) -> None:
    with pytest.raises(BadRequestError, match="valid date"):
        meal_service.daily_summary("user-1", "yesterday")


def test_settings_default_then_last_write_wins(
    settings_repository: InMemorySettingsRepository,
) -> None:
    service = RemoteSettingsService(settings_repository)

    assert service.get("user-1")["dailyCalorieGoal"] == 2000

    service.update("user-1", {"dailyCalorieGoal": 1800})
    saved = service.update("user-1", {"dailyCalorieGoal": 1600, "weight": 60})

    stored = service.get("user-1")
    assert stored == saved
    assert stored["dailyCalorieGoal"] == 1600
    assert stored["id"] == "user-1"
    assert "updatedAt" in stored


def test_daily_summary_rounds_halves_up(
    meal_service: RemoteMealService,
    meal_repository: InMemoryMealRepository,
    food_repository: InMemoryFoodRepository,
) -> None:
    food_repository.put_food(Food("food-200", "Test", 25, 2.5, 4.5, 0.5, "Other"))
    meal_repository.put_meal(
        RemoteMeal(
            id="legacy",
            user_id="user-1",
            food_id="food-200",
            food_name="",
            amount=50,
            meal_type="snack",
            timestamp=datetime(2024, 5, 1, 9, tzinfo=UTC),
        )
    )
    meal_service.add_meal(
        _meal_payload(id="meal_2", calories=99.5, protein=0, carbs=0, fat=0)
    )

    summary = meal_service.daily_summary("user-1", "2024-05-01")

    legacy = next(meal for meal in summary.meals if meal.id == "legacy")
    assert legacy.calories == 13
    assert (legacy.protein, legacy.carbs, legacy.fat) == (1.3, 2.3, 0.3)
    assert summary.totals.calories == 113
