"""Supabase repository for per-user settings documents."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from calorie_calculator.services.remote_settings import SettingsRepository


@dataclass
class SupabaseSettingsRepository(SettingsRepository):
    """Stores each user's settings as one JSON document."""

    client: Client

    def get_settings(self, user_id: str) -> dict[str, object] | None:
        """Return the stored settings document for a user."""
        response = (
            self.client.table("user_settings")
            .select("settings")
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0].get("settings") or None

    def put_settings(self, user_id: str, settings: dict[str, object]) -> None:
        """Replace the settings document."""
        self.client.table("user_settings").upsert(
            {
                "user_id": user_id,
                "settings": settings,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            }
        ).execute()
