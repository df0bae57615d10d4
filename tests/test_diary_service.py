"""Tests for the local diary service on a SQLite store."""

from datetime import UTC, datetime

import pytest

from calorie_calculator.adapters.sqlite_local_store import SqliteLocalStore
from calorie_calculator.domain.models import MealRecord, UserSettings
from calorie_calculator.seed_foods import DEFAULT_FOODS
from calorie_calculator.services.diary import (
    DefaultFoodDeletionError,
    DiaryService,
    FoodNotFoundError,
    InvalidInputError,
    LocalStoreError,
)


def _record(meal_id: str, timestamp: datetime, food_id: str = "food-003") -> MealRecord:
    return MealRecord(
        id=meal_id,
        food_id=food_id,
        food_name="Apple",
        amount=200,
        calories=108,
        protein=0.4,
        carbs=29.2,
        fat=0.2,
        timestamp=timestamp,
        meal_type="snack",
    )


def test_initialize_seeds_foods_and_settings_once(
    diary: DiaryService, local_store: SqliteLocalStore
) -> None:
    diary.initialize()

    assert local_store.count_foods() == len(DEFAULT_FOODS)
    assert diary.get_user_settings() == UserSettings()


def test_initialize_wraps_store_failures(local_store: SqliteLocalStore) -> None:
    local_store.close()

    with pytest.raises(LocalStoreError, match="Failed to initialize"):
        DiaryService(local_store).initialize()


def test_search_is_substring_and_ordered_by_name(diary: DiaryService) -> None:
    names = [food.name for food in diary.search_foods("an")]

    assert names == sorted(names)
    assert "Banana" in names
    assert diary.search_foods("no such food") == []


def test_categories_are_distinct_and_sorted(diary: DiaryService) -> None:
    categories = diary.get_food_categories()

    assert categories == sorted(set(categories))
    assert "Protein" in categories


def test_add_custom_food_uses_custom_prefix(diary: DiaryService) -> None:
    food = diary.add_custom_food("  Granola ", 450, 10, 60, 18, "Staples")

    assert food.id.startswith("custom_")
    assert food.is_custom
    assert diary.get_food(food.id) == food
    assert food.name == "Granola"


def test_add_custom_food_rejects_invalid_values(diary: DiaryService) -> None:
    with pytest.raises(InvalidInputError) as excinfo:
        diary.add_custom_food("", 2000, 10, 10, 10, "Staples")

    fields = {error.field for error in excinfo.value.result.errors}
    assert fields == {"name", "calories_per_100g"}


def test_delete_default_food_is_refused(diary: DiaryService) -> None:
    with pytest.raises(DefaultFoodDeletionError, match="Cannot delete default food"):
        diary.delete_food("food-001")

    assert diary.get_food("food-001") is not None


def test_delete_unknown_custom_food(diary: DiaryService) -> None:
    with pytest.raises(FoodNotFoundError, match="Food not found"):
        diary.delete_food("custom_missing")


def test_delete_custom_food_cascades_meal_records(diary: DiaryService) -> None:
    food = diary.add_custom_food("Granola", 450, 10, 60, 18, "Staples")
    other = diary.get_food("food-003")
    assert other is not None
    eaten_at = datetime(2024, 5, 1, 8, tzinfo=UTC)
    diary.log_meal(food, 50, "breakfast", eaten_at)
    diary.log_meal(food, 80, "snack", eaten_at)
    diary.log_meal(other, 100, "snack", eaten_at)

    removed = diary.delete_food(food.id)

    assert removed == 2
    assert diary.get_food(food.id) is None
    remaining = diary.get_meal_records_by_date("2024-05-01")
    assert [meal.food_id for meal in remaining] == ["food-003"]


def test_delete_food_rolls_back_meal_removal_on_failure(
    diary: DiaryService, local_store: SqliteLocalStore
) -> None:
    food = diary.add_custom_food("Granola", 450, 10, 60, 18, "Staples")
    diary.log_meal(food, 50, "breakfast", datetime(2024, 5, 1, 8, tzinfo=UTC))
    local_store.connection.execute(
        "CREATE TRIGGER keep_foods BEFORE DELETE ON foods "
        "BEGIN SELECT RAISE(ABORT, 'foods are read-only'); END"
    )

    with pytest.raises(LocalStoreError):
        diary.delete_food(food.id)

    assert diary.get_food(food.id) is not None
    remaining = diary.get_meal_records_by_date("2024-05-01")
    assert [meal.food_id for meal in remaining] == [food.id]


def test_log_meal_snapshots_nutrition(diary: DiaryService) -> None:
    food = diary.get_food("food-001")
    assert food is not None

    record = diary.log_meal(food, 200, "lunch", datetime(2024, 5, 1, 12, tzinfo=UTC))

    assert record.id.startswith("meal_")
    assert record.food_name == food.name
    assert record.calories == 336
    assert record.carbs == 74.2
    assert diary.get_meal_records_by_date("2024-05-01") == [record]


def test_log_meal_validates_amount_and_meal_type(diary: DiaryService) -> None:
    food = diary.get_food("food-001")
    assert food is not None

    with pytest.raises(InvalidInputError) as excinfo:
        diary.log_meal(food, 0, "brunch")

    assert [error.field for error in excinfo.value.result.errors] == [
        "amount",
        "meal_type",
    ]


def test_meals_by_date_use_half_open_utc_day(diary: DiaryService) -> None:
    diary.add_meal_record(_record("meal_a", datetime(2024, 5, 1, 0, tzinfo=UTC)))
    diary.add_meal_record(
        _record("meal_b", datetime(2024, 5, 1, 23, 59, 59, 999000, tzinfo=UTC))
    )
    diary.add_meal_record(_record("meal_c", datetime(2024, 5, 2, 0, tzinfo=UTC)))
    diary.add_meal_record(_record("meal_d", datetime(2024, 4, 30, 23, tzinfo=UTC)))

    ids = [meal.id for meal in diary.get_meal_records_by_date("2024-05-01")]

    assert ids == ["meal_a", "meal_b"]


def test_meal_timestamps_round_trip_as_utc(diary: DiaryService) -> None:
    eaten_at = datetime(2024, 5, 1, 7, 30, 15, 123000, tzinfo=UTC)
    diary.add_meal_record(_record("meal_a", eaten_at))

    (stored,) = diary.get_meal_records_by_date("2024-05-01")

    assert stored.timestamp == eaten_at


def test_meal_records_since(diary: DiaryService) -> None:
    diary.add_meal_record(_record("meal_old", datetime(2024, 4, 1, tzinfo=UTC)))
    diary.add_meal_record(_record("meal_new", datetime(2024, 5, 10, tzinfo=UTC)))

    meals = diary.get_meal_records_since(datetime(2024, 5, 1, tzinfo=UTC))

    assert [meal.id for meal in meals] == ["meal_new"]


def test_daily_summary_totals_against_goal(diary: DiaryService) -> None:
    diary.update_user_settings(daily_calorie_goal=1800)
    diary.add_meal_record(_record("meal_a", datetime(2024, 5, 1, 8, tzinfo=UTC)))
    diary.add_meal_record(_record("meal_b", datetime(2024, 5, 1, 15, tzinfo=UTC)))

    summary = diary.get_daily_summary("2024-05-01")

    assert summary.date == "2024-05-01"
    assert len(summary.meals) == 2
    assert summary.total_calories == 216
    assert summary.total_carbs == pytest.approx(58.4)
    assert summary.goal_calories == 1800


def test_delete_and_clear_meal_records(diary: DiaryService) -> None:
    diary.add_meal_record(_record("meal_a", datetime(2024, 5, 1, 8, tzinfo=UTC)))
    diary.add_meal_record(_record("meal_b", datetime(2024, 5, 1, 9, tzinfo=UTC)))

    diary.delete_meal_record("meal_a")
    assert [meal.id for meal in diary.get_meal_records_by_date("2024-05-01")] == [
        "meal_b"
    ]

    diary.clear_all_meal_records()
    assert diary.get_meal_records_by_date("2024-05-01") == []


def test_duplicate_meal_id_raises_store_error(diary: DiaryService) -> None:
    record = _record("meal_a", datetime(2024, 5, 1, 8, tzinfo=UTC))
    diary.add_meal_record(record)

    with pytest.raises(LocalStoreError):
        diary.add_meal_record(record)


def test_update_user_settings_is_partial(diary: DiaryService) -> None:
    diary.update_user_settings(weight=62.5, activity_level="active", age=None)

    settings = diary.get_user_settings()
    assert settings.weight == 62.5
    assert settings.activity_level == "active"
    assert settings.age == 30
    assert settings.daily_calorie_goal == 2000


def test_update_user_settings_rejects_unknown_fields(diary: DiaryService) -> None:
    with pytest.raises(ValueError, match="Unknown settings fields"):
        diary.update_user_settings(timezone="UTC")


def test_update_user_settings_creates_row_when_missing(
    diary: DiaryService, local_store: SqliteLocalStore
) -> None:
    local_store.delete_settings()

    diary.update_user_settings(daily_calorie_goal=2500)

    assert diary.get_user_settings().daily_calorie_goal == 2500


def test_missing_settings_raise(
    diary: DiaryService, local_store: SqliteLocalStore
) -> None:
    local_store.delete_settings()

    with pytest.raises(LocalStoreError, match="User settings not found"):
        diary.get_user_settings()


def test_reset_user_settings(diary: DiaryService) -> None:
    diary.update_user_settings(daily_calorie_goal=1500, gender="female")

    diary.reset_user_settings()

    assert diary.get_user_settings() == UserSettings()
