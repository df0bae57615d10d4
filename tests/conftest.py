"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path

import pytest

from calorie_calculator.adapters.api_client import ApiClient, ApiError
from calorie_calculator.adapters.key_value_store import KeyValueStore
from calorie_calculator.adapters.sqlite_local_store import SqliteLocalStore
from calorie_calculator.config import Settings
from calorie_calculator.containers import AppContainer
from calorie_calculator.domain.models import Food
from calorie_calculator.domain.remote import AccountRecord, RemoteMeal
from calorie_calculator.services.accounts import (
    AccountRepository,
    AccountService,
    TokenIssuer,
)
from calorie_calculator.services.auth import AuthService
from calorie_calculator.services.catalog import CatalogService, FoodRepository
from calorie_calculator.services.cloud_sync import CloudSyncService
from calorie_calculator.services.diary import DiaryService
from calorie_calculator.services.remote_meals import MealRepository, RemoteMealService
from calorie_calculator.services.remote_settings import (
    RemoteSettingsService,
    SettingsRepository,
)


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """Dictionary-backed key-value store for tests."""

    items: dict[str, str] = field(default_factory=dict)

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


@dataclass
class InMemoryAccountRepository(AccountRepository):
    """In-memory account repository for tests."""

    accounts: dict[str, AccountRecord] = field(default_factory=dict)

    def get_by_email(self, email: str) -> AccountRecord | None:
        for account in self.accounts.values():
            if account.email == email:
                return account
        return None

    def get_by_id(self, user_id: str) -> AccountRecord | None:
        return self.accounts.get(user_id)

    def create_account(self, account: AccountRecord) -> None:
        self.accounts[account.id] = account

    def update_account(self, user_id: str, fields: dict[str, object]) -> None:
        self.accounts[user_id] = replace(self.accounts[user_id], **fields)


@dataclass
class InMemoryFoodRepository(FoodRepository):
    """In-memory catalogue for tests."""

    foods: dict[str, Food] = field(default_factory=dict)

    def search_foods(self, query: str) -> list[Food]:
        matches = [food for food in self.foods.values() if query in food.name]
        return sorted(matches, key=lambda food: food.name)

    def get_food(self, food_id: str) -> Food | None:
        return self.foods.get(food_id)

    def put_food(self, food: Food) -> None:
        self.foods[food.id] = food


@dataclass
class InMemoryMealRepository(MealRepository):
    """In-memory meal table keyed by meal id."""

    meals: dict[str, RemoteMeal] = field(default_factory=dict)

    def put_meal(self, meal: RemoteMeal) -> None:
        self.meals[meal.id] = meal

    def list_meals(
        self, user_id: str, start: datetime, end: datetime
    ) -> list[RemoteMeal]:
        matches = [
            meal
            for meal in self.meals.values()
            if meal.user_id == user_id and start <= meal.timestamp < end
        ]
        return sorted(matches, key=lambda meal: meal.timestamp)


@dataclass
class InMemorySettingsRepository(SettingsRepository):
    """In-memory settings documents."""

    documents: dict[str, dict[str, object]] = field(default_factory=dict)

    def get_settings(self, user_id: str) -> dict[str, object] | None:
        return self.documents.get(user_id)

    def put_settings(self, user_id: str, settings: dict[str, object]) -> None:
        self.documents[user_id] = settings


@dataclass
class FakeApiClient(ApiClient):
    """Fake remote API that records pushes and serves canned pulls."""

    remote_settings: dict[str, object] = field(default_factory=dict)
    daily_meals: dict[str, list[dict[str, object]]] = field(default_factory=dict)
    pushed_meals: dict[str, dict[str, object]] = field(default_factory=dict)
    pushed_settings: list[dict[str, object]] = field(default_factory=list)
    failing_meal_ids: set[str] = field(default_factory=set)
    failing_days: set[str] = field(default_factory=set)
    fail_settings: bool = False
    auth_error: str | None = None
    healthy: bool = True
    signed_out: bool = False

    async def sign_up(
        self, email: str, password: str, display_name: str | None = None
    ) -> dict[str, object]:
        if self.auth_error:
            raise ApiError(self.auth_error, status_code=400)
        return {
            "token": "token-1",
            "user": {
                "id": "user-1",
                "email": email,
                "displayName": display_name or email.split("@")[0],
                "dailyCalorieGoal": 2000,
            },
        }

    async def sign_in(self, email: str, password: str) -> dict[str, object]:
        if self.auth_error:
            raise ApiError(self.auth_error, status_code=401)
        return {
            "token": "token-1",
            "user": {
                "id": "user-1",
                "email": email,
                "displayName": "Test",
                "dailyCalorieGoal": 1800,
            },
        }

    async def sign_out(self) -> None:
        self.signed_out = True

    async def get_settings(self, user_id: str) -> dict[str, object]:
        if self.fail_settings:
            raise ApiError("Request failed", status_code=500)
        return self.remote_settings

    async def update_settings(
        self, user_id: str, settings: dict[str, object]
    ) -> dict[str, object]:
        if self.fail_settings:
            raise ApiError("Request failed", status_code=500)
        self.pushed_settings.append(settings)
        return {"message": "Settings updated", "settings": settings}

    async def add_meal(self, meal: dict[str, object]) -> dict[str, object]:
        meal_id = str(meal["id"])
        if meal_id in self.failing_meal_ids:
            raise ApiError("Request failed", status_code=500)
        self.pushed_meals[meal_id] = meal
        return {"id": meal_id, "message": "Meal added"}

    async def get_daily_summary(self, user_id: str, date: str) -> dict[str, object]:
        if date in self.failing_days:
            raise ApiError("Network error: timed out")
        return {"date": date, "meals": self.daily_meals.get(date, [])}

    async def health_check(self) -> bool:
        return self.healthy


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        jwt_secret="test-secret",
    )


@pytest.fixture
def token_issuer(settings: Settings) -> TokenIssuer:
    return TokenIssuer(secret=settings.jwt_secret)


@pytest.fixture
def account_repository() -> InMemoryAccountRepository:
    return InMemoryAccountRepository()


@pytest.fixture
def account_service(
    account_repository: InMemoryAccountRepository, token_issuer: TokenIssuer
) -> AccountService:
    return AccountService(repository=account_repository, tokens=token_issuer)


@pytest.fixture
def food_repository() -> InMemoryFoodRepository:
    return InMemoryFoodRepository()


@pytest.fixture
def meal_repository() -> InMemoryMealRepository:
    return InMemoryMealRepository()


@pytest.fixture
def settings_repository() -> InMemorySettingsRepository:
    return InMemorySettingsRepository()


@pytest.fixture
def container(
    settings: Settings,
    account_service: AccountService,
    food_repository: InMemoryFoodRepository,
    meal_repository: InMemoryMealRepository,
    settings_repository: InMemorySettingsRepository,
) -> AppContainer:
    catalog_service = CatalogService(food_repository)
    catalog_service.seed_defaults()
    return AppContainer(
        settings=settings,
        account_service=account_service,
        catalog_service=catalog_service,
        meal_service=RemoteMealService(meals=meal_repository, foods=food_repository),
        settings_service=RemoteSettingsService(settings_repository),
    )


@pytest.fixture
def local_store(tmp_path: Path) -> SqliteLocalStore:
    store = SqliteLocalStore.open(tmp_path / "diary.db")
    yield store
    store.close()


@pytest.fixture
def diary(local_store: SqliteLocalStore) -> DiaryService:
    service = DiaryService(local_store)
    service.initialize()
    return service


@pytest.fixture
def storage() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def api_client() -> FakeApiClient:
    return FakeApiClient()


@pytest.fixture
def auth_service(
    api_client: FakeApiClient, storage: InMemoryKeyValueStore
) -> AuthService:
    return AuthService(api_client=api_client, storage=storage)


@pytest.fixture
def cloud_sync(
    auth_service: AuthService, diary: DiaryService, api_client: FakeApiClient
) -> CloudSyncService:
    return CloudSyncService(
        auth_service=auth_service, diary=diary, api_client=api_client
    )
