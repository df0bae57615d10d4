"""Dependency container wiring for the server and the device client."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from calorie_calculator.adapters.api_client import HttpxApiClient
from calorie_calculator.adapters.key_value_store import SqliteKeyValueStore
from calorie_calculator.adapters.sqlite_local_store import SqliteLocalStore
from calorie_calculator.adapters.supabase_account_repository import (
    SupabaseAccountRepository,
)
from calorie_calculator.adapters.supabase_food_repository import (
    SupabaseFoodRepository,
)
from calorie_calculator.adapters.supabase_meal_repository import (
    SupabaseMealRepository,
)
from calorie_calculator.adapters.supabase_settings_repository import (
    SupabaseSettingsRepository,
)
from calorie_calculator.config import ClientSettings, Settings
from calorie_calculator.services.accounts import AccountService, TokenIssuer
from calorie_calculator.services.auth import AuthService
from calorie_calculator.services.catalog import CatalogService
from calorie_calculator.services.cloud_sync import CloudSyncService
from calorie_calculator.services.diary import DiaryService
from calorie_calculator.services.remote_meals import RemoteMealService
from calorie_calculator.services.remote_settings import RemoteSettingsService


@dataclass
class AppContainer:
    """Holds server-wide dependencies."""

    settings: Settings
    account_service: AccountService
    catalog_service: CatalogService
    meal_service: RemoteMealService
    settings_service: RemoteSettingsService


@dataclass
class ClientContainer:
    """Holds the device-side services, constructed once at start-up."""

    settings: ClientSettings
    diary: DiaryService
    api_client: HttpxApiClient
    auth_service: AuthService
    cloud_sync: CloudSyncService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default server container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    food_repository = SupabaseFoodRepository(supabase_client)
    tokens = TokenIssuer(
        secret=resolved_settings.jwt_secret,
        algorithm=resolved_settings.jwt_algorithm,
        expires_days=resolved_settings.jwt_expires_days,
    )
    return AppContainer(
        settings=resolved_settings,
        account_service=AccountService(
            repository=SupabaseAccountRepository(supabase_client), tokens=tokens
        ),
        catalog_service=CatalogService(food_repository),
        meal_service=RemoteMealService(
            meals=SupabaseMealRepository(supabase_client), foods=food_repository
        ),
        settings_service=RemoteSettingsService(
            SupabaseSettingsRepository(supabase_client)
        ),
    )


def build_client_container(settings: ClientSettings | None = None) -> ClientContainer:
    """Open device storage and wire the client services.

    The local database is initialized (tables and seed data) before returning.
    """
    resolved_settings = settings or ClientSettings()
    local_store = SqliteLocalStore.open(resolved_settings.local_db_path)
    storage = SqliteKeyValueStore.open(resolved_settings.storage_path)
    diary = DiaryService(local_store)
    diary.initialize()
    api_client = HttpxApiClient.create(resolved_settings.api_base_url, storage)
    auth_service = AuthService(api_client=api_client, storage=storage)
    auth_service.restore()
    cloud_sync = CloudSyncService(
        auth_service=auth_service,
        diary=diary,
        api_client=api_client,
        window_days=resolved_settings.sync_window_days,
    )

    async def close_resources() -> None:
        await api_client.close()
        local_store.close()
        storage.close()

    return ClientContainer(
        settings=resolved_settings,
        diary=diary,
        api_client=api_client,
        auth_service=auth_service,
        cloud_sync=cloud_sync,
        close_resources=close_resources,
    )
