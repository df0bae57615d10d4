"""Push and pull between the device database and the remote API."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from calorie_calculator.adapters.api_client import ApiClient
from calorie_calculator.domain.models import (
    ACTIVITY_LEVELS,
    GENDERS,
    MEAL_TYPES,
    MealRecord,
    UserSettings,
)
from calorie_calculator.domain.timestamps import (
    format_timestamp,
    parse_timestamp,
    utc_today,
)
from calorie_calculator.services.auth import AuthService
from calorie_calculator.services.diary import DiaryService, new_meal_id

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 30
DEFAULT_CALORIE_GOAL = UserSettings().daily_calorie_goal


class SyncError(RuntimeError):
    """Raised when a sync cannot start or its settings step fails."""


@dataclass
class SyncReport:
    """Outcome counts for one sync run."""

    settings_synced: bool = False
    meals_synced: int = 0
    meals_failed: int = 0
    days_failed: int = 0


@dataclass
class CloudSyncService:
    """Best-effort mirror of local data for a signed-in, non-guest user.

    There is no conflict detection; whichever side is written last wins.
    Item-level failures are logged and counted, never raised.
    """

    auth_service: AuthService
    diary: DiaryService
    api_client: ApiClient
    window_days: int = DEFAULT_WINDOW_DAYS

    async def sync_to_cloud(self) -> SyncReport:
        """Push settings and the recent meal window to the remote API."""
        user = self.auth_service.get_current_user()
        if user is None or user.is_guest:
            raise SyncError("Sign in to sync your data")
        try:
            settings = self.diary.get_user_settings()
            since = datetime.now(tz=UTC) - timedelta(days=self.window_days)
            meals = self.diary.get_meal_records_since(since)
            await self.api_client.update_settings(
                user.id, settings_to_payload(settings)
            )
        except Exception as exc:
            logger.exception("Sync to cloud failed", extra={"user_id": user.id})
            raise SyncError("Data sync failed") from exc

        report = SyncReport(settings_synced=True)
        for meal in meals:
            try:
                await self.api_client.add_meal(meal_to_payload(meal, user.id))
            except Exception:
                report.meals_failed += 1
                logger.warning(
                    "Failed to push meal", extra={"meal_id": meal.id}, exc_info=True
                )
                continue
            report.meals_synced += 1
        logger.info(
            "Pushed local data",
            extra={"user_id": user.id, "meals": report.meals_synced},
        )
        return report

    async def sync_from_cloud(self) -> SyncReport:
        """Replace local meals and settings with the remote copy.

        Does nothing for guest or signed-out callers.
        """
        report = SyncReport()
        user = self.auth_service.get_current_user()
        if user is None or user.is_guest:
            return report
        try:
            self.diary.clear_all_meal_records()
            self.diary.reset_user_settings()
        except Exception as exc:
            logger.exception("Sync from cloud failed", extra={"user_id": user.id})
            raise SyncError("Data sync failed") from exc

        try:
            remote_settings = await self.api_client.get_settings(user.id)
            self.diary.update_user_settings(**settings_from_payload(remote_settings))
            report.settings_synced = True
        except Exception:
            logger.warning("Failed to restore settings", exc_info=True)

        today = utc_today()
        for offset in range(self.window_days, -1, -1):
            day = (today - timedelta(days=offset)).isoformat()
            try:
                summary = await self.api_client.get_daily_summary(user.id, day)
            except Exception:
                report.days_failed += 1
                logger.warning(
                    "Failed to fetch remote meals", extra={"day": day}, exc_info=True
                )
                continue
            for payload in summary.get("meals") or []:
                try:
                    self.diary.add_meal_record(meal_from_payload(payload))
                except Exception:
                    report.meals_failed += 1
                    logger.warning(
                        "Failed to restore meal", extra={"day": day}, exc_info=True
                    )
                    continue
                report.meals_synced += 1
        logger.info(
            "Pulled remote data",
            extra={"user_id": user.id, "meals": report.meals_synced},
        )
        return report

    async def auto_sync(self) -> None:
        """Push in the background; failures are logged and left for next time."""
        if not self.auth_service.is_authenticated():
            return
        try:
            await self.sync_to_cloud()
        except SyncError:
            logger.warning("Automatic sync failed", exc_info=True)

    async def check_connection(self) -> bool:
        """Return True when the remote API is reachable."""
        try:
            return await self.api_client.health_check()
        except Exception:
            return False


def settings_to_payload(settings: UserSettings) -> dict[str, object]:
    """Serialize settings in the remote schema."""
    return {
        "dailyCalorieGoal": settings.daily_calorie_goal,
        "weight": settings.weight,
        "height": settings.height,
        "age": settings.age,
        "gender": settings.gender,
        "activityLevel": settings.activity_level,
    }


def settings_from_payload(payload: dict[str, object]) -> dict[str, object]:
    """Read remote settings, accepting the legacy snake_case field names."""
    goal = (
        payload.get("dailyCalorieGoal")
        or payload.get("targetCalories")
        or payload.get("target_calories")
        or DEFAULT_CALORIE_GOAL
    )
    fields: dict[str, object] = {"daily_calorie_goal": int(goal)}
    for key in ("weight", "height"):
        if isinstance(payload.get(key), int | float):
            fields[key] = float(payload[key])
    if isinstance(payload.get("age"), int | float):
        fields["age"] = int(payload["age"])
    if payload.get("gender") in GENDERS:
        fields["gender"] = payload["gender"]
    activity = payload.get("activityLevel") or payload.get("activity_level")
    if activity in ACTIVITY_LEVELS:
        fields["activity_level"] = activity
    return fields


def meal_to_payload(meal: MealRecord, user_id: str) -> dict[str, object]:
    """Serialize a meal record for POST /meals."""
    return {
        "id": meal.id,
        "userId": user_id,
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


def meal_from_payload(payload: dict[str, object]) -> MealRecord:
    """Build a local meal record from a remote meal."""
    meal_type = payload.get("mealType") or payload.get("meal_type")
    if meal_type not in MEAL_TYPES:
        raise ValueError(f"Unknown meal type: {meal_type!r}")
    return MealRecord(
        id=str(payload.get("id") or new_meal_id()),
        food_id=str(payload.get("foodId") or payload["food_id"]),
        food_name=str(payload.get("foodName") or payload.get("food_name") or ""),
        amount=float(payload["amount"]),
        calories=float(payload.get("calories") or 0),
        protein=float(payload.get("protein") or 0),
        carbs=float(payload.get("carbs") or 0),
        fat=float(payload.get("fat") or 0),
        timestamp=parse_timestamp(str(payload["timestamp"])),
        meal_type=str(meal_type),
    )
