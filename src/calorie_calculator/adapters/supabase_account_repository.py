"""Supabase-backed account repository."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from calorie_calculator.domain.remote import AccountRecord
from calorie_calculator.services.accounts import AccountRepository

_COLUMNS = (
    "id, email, display_name, password_hash, daily_calorie_goal, "
    "created_at, updated_at, last_login_at"
)


@dataclass
class SupabaseAccountRepository(AccountRepository):
    """Supabase implementation for account persistence."""

    client: Client

    def get_by_email(self, email: str) -> AccountRecord | None:
        """Return the account for an email, if present."""
        response = (
            self.client.table("users")
            .select(_COLUMNS)
            .eq("email", email)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_account(response.data[0])

    def get_by_id(self, user_id: str) -> AccountRecord | None:
        """Return the account for an id, if present."""
        response = (
            self.client.table("users")
            .select(_COLUMNS)
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_account(response.data[0])

    def create_account(self, account: AccountRecord) -> None:
        """Insert an account row."""
        response = (
            self.client.table("users")
            .insert(
                {
                    "id": account.id,
                    "email": account.email,
                    "display_name": account.display_name,
                    "password_hash": account.password_hash,
                    "daily_calorie_goal": account.daily_calorie_goal,
                    "created_at": account.created_at.isoformat(),
                    "updated_at": account.updated_at.isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create user in Supabase")

    def update_account(self, user_id: str, fields: dict[str, object]) -> None:
        """Update columns on an account row."""
        payload = {
            key: value.isoformat() if isinstance(value, datetime) else value
            for key, value in fields.items()
        }
        self.client.table("users").update(payload).eq("id", user_id).execute()


def _parse_account(row: dict[str, object]) -> AccountRecord:
    last_login = row.get("last_login_at")
    return AccountRecord(
        id=str(row["id"]),
        email=str(row["email"]),
        display_name=str(row.get("display_name") or ""),
        password_hash=str(row["password_hash"]),
        daily_calorie_goal=int(row.get("daily_calorie_goal") or 2000),
        created_at=datetime.fromisoformat(str(row["created_at"])),
        updated_at=datetime.fromisoformat(str(row["updated_at"])),
        last_login_at=datetime.fromisoformat(str(last_login)) if last_login else None,
    )
