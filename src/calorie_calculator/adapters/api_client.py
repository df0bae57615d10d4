"""HTTP client for the calorie calculator REST API."""

import logging
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import quote

import httpx

from calorie_calculator.adapters.key_value_store import KeyValueStore

logger = logging.getLogger(__name__)

AUTH_TOKEN_KEY = "authToken"
_PUBLIC_ENDPOINTS = ("/auth/signup", "/auth/signin")


class ApiError(Exception):
    """Raised when a request fails or returns a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ApiClient(Protocol):
    """Interface for the remote API used by auth and sync."""

    async def sign_up(
        self, email: str, password: str, display_name: str | None = None
    ) -> dict[str, object]:
        """Create an account and persist the returned token."""

    async def sign_in(self, email: str, password: str) -> dict[str, object]:
        """Sign in and persist the returned token."""

    async def sign_out(self) -> None:
        """Forget the stored token."""

    async def get_settings(self, user_id: str) -> dict[str, object]:
        """Return remote settings for a user."""

    async def update_settings(
        self, user_id: str, settings: dict[str, object]
    ) -> dict[str, object]:
        """Replace remote settings for a user."""

    async def add_meal(self, meal: dict[str, object]) -> dict[str, object]:
        """Create or replace a remote meal record."""

    async def get_daily_summary(self, user_id: str, date: str) -> dict[str, object]:
        """Return remote meals and totals for a day."""

    async def health_check(self) -> bool:
        """Return True when the API answers its health check."""


@dataclass
class HttpxApiClient(ApiClient):
    """httpx-backed API client that injects the bearer token."""

    base_url: str
    http_client: httpx.AsyncClient
    storage: KeyValueStore
    token: str | None = None

    def __post_init__(self) -> None:
        self.base_url = self.base_url.rstrip("/")
        if self.token is None:
            self.token = self.storage.get_item(AUTH_TOKEN_KEY)

    @classmethod
    def create(cls, base_url: str, storage: KeyValueStore) -> "HttpxApiClient":
        """Create a client with a managed httpx session."""
        return cls(base_url=base_url, http_client=httpx.AsyncClient(), storage=storage)

    def save_token(self, token: str) -> None:
        """Keep a bearer token in memory and in storage."""
        self.token = token
        self.storage.set_item(AUTH_TOKEN_KEY, token)

    def clear_token(self) -> None:
        """Forget the bearer token."""
        self.token = None
        self.storage.remove_item(AUTH_TOKEN_KEY)

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        json: dict[str, object] | None = None,
        params: dict[str, str] | None = None,
    ) -> dict[str, object]:
        """Send a request and return the decoded JSON body.

        Raises ApiError with the server message for non-2xx responses and with
        a network message when the request cannot be completed.
        """
        headers = {"Content-Type": "application/json"}
        if self.token and not endpoint.startswith(_PUBLIC_ENDPOINTS):
            headers["Authorization"] = f"Bearer {self.token}"
        try:
            response = await self.http_client.request(
                method,
                f"{self.base_url}{endpoint}",
                json=json,
                params=params,
                headers=headers,
            )
        except httpx.HTTPError as exc:
            logger.warning(
                "API request failed", extra={"endpoint": endpoint, "error": str(exc)}
            )
            raise ApiError(f"Network error: {exc}") from exc
        try:
            data = response.json()
        except ValueError:
            data = {}
        if not response.is_success:
            message = "Request failed"
            if isinstance(data, dict) and data.get("error"):
                message = str(data["error"])
            raise ApiError(message, status_code=response.status_code)
        return data

    async def sign_up(
        self, email: str, password: str, display_name: str | None = None
    ) -> dict[str, object]:
        """Create an account; the token is stored as part of the call."""
        data = await self.request(
            "POST",
            "/auth/signup",
            json={"email": email, "password": password, "displayName": display_name},
        )
        self.save_token(str(data["token"]))
        return data

    async def sign_in(self, email: str, password: str) -> dict[str, object]:
        """Sign in; the token is stored as part of the call."""
        data = await self.request(
            "POST", "/auth/signin", json={"email": email, "password": password}
        )
        self.save_token(str(data["token"]))
        return data

    async def sign_out(self) -> None:
        """Drop the local session token."""
        self.clear_token()

    async def get_current_user(self) -> dict[str, object]:
        """Return the signed-in user's profile."""
        return await self.request("GET", "/auth/me")

    async def change_password(
        self, current_password: str, new_password: str
    ) -> dict[str, object]:
        """Change the signed-in user's password."""
        return await self.request(
            "POST",
            "/auth/change-password",
            json={"currentPassword": current_password, "newPassword": new_password},
        )

    async def search_foods(self, query: str) -> list[dict[str, object]]:
        """Search the remote food catalogue."""
        data = await self.request("GET", "/foods/search", params={"query": query})
        return list(data.get("foods", []))

    async def get_food(self, food_id: str) -> dict[str, object]:
        """Return a remote food by id."""
        return await self.request("GET", f"/foods/{_segment(food_id)}")

    async def add_food(self, food: dict[str, object]) -> dict[str, object]:
        """Create or replace a remote food."""
        return await self.request("POST", "/foods", json=food)

    async def get_settings(self, user_id: str) -> dict[str, object]:
        """Return remote settings."""
        return await self.request("GET", f"/users/{_segment(user_id)}/settings")

    async def update_settings(
        self, user_id: str, settings: dict[str, object]
    ) -> dict[str, object]:
        """Replace remote settings."""
        return await self.request(
            "PUT", f"/users/{_segment(user_id)}/settings", json=settings
        )

    async def add_meal(self, meal: dict[str, object]) -> dict[str, object]:
        """Create or replace a remote meal record."""
        return await self.request("POST", "/meals", json=meal)

    async def create_meals_batch(
        self, meals: list[dict[str, object]]
    ) -> dict[str, list[str]]:
        """Send meals one at a time and collect their ids."""
        inserted_ids: list[str] = []
        for meal in meals:
            result = await self.add_meal(meal)
            inserted_ids.append(str(result.get("id")))
        return {"insertedIds": inserted_ids}

    async def get_daily_summary(self, user_id: str, date: str) -> dict[str, object]:
        """Return remote meals and totals for a day."""
        return await self.request(
            "GET", f"/meals/{_segment(user_id)}/daily/{_segment(date)}"
        )

    async def health_check(self) -> bool:
        """Return True when the health endpoint answers with 2xx."""
        try:
            response = await self.http_client.get(f"{self.base_url}/health")
        except httpx.HTTPError:
            return False
        return response.is_success

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _segment(value: str) -> str:
    return quote(value, safe="")
