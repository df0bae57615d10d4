"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Server settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    jwt_expires_days: int = 7
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


class ClientSettings(BaseSettings):
    """Device-side settings for local storage and the API endpoint."""

    api_base_url: str = "http://localhost:3000"
    local_db_path: str = "calorie_calculator.db"
    storage_path: str = "app_storage.db"
    sync_window_days: int = 30

    model_config = SettingsConfigDict(
        env_prefix="CALORIE_",
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
