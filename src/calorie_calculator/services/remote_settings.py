"""Per-user settings stored on the server."""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

DEFAULT_CALORIE_GOAL = 2000


class SettingsRepository(Protocol):
    """Persistence interface for per-user settings documents."""

    def get_settings(self, user_id: str) -> dict[str, object] | None:
        """Return the stored settings document, if any."""

    def put_settings(self, user_id: str, settings: dict[str, object]) -> None:
        """Replace the settings document."""


@dataclass
class RemoteSettingsService:
    """Read and replace user settings; the last write wins."""

    repository: SettingsRepository

    def get(self, user_id: str) -> dict[str, object]:
        """Return stored settings or the defaults for a new user."""
        stored = self.repository.get_settings(user_id)
        if stored is None:
            return {
                "id": user_id,
                "dailyCalorieGoal": DEFAULT_CALORIE_GOAL,
                "createdAt": datetime.now(tz=UTC).isoformat(),
            }
        return stored

    def update(self, user_id: str, body: dict[str, object]) -> dict[str, object]:
        """Replace the settings document with the request body."""
        settings = {
            **body,
            "id": user_id,
            "updatedAt": datetime.now(tz=UTC).isoformat(),
        }
        self.repository.put_settings(user_id, settings)
        return settings
