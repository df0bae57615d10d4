"""Device identity: signed out, guest, or signed in."""

import json
import logging
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime

from calorie_calculator.adapters.api_client import AUTH_TOKEN_KEY, ApiClient
from calorie_calculator.adapters.key_value_store import KeyValueStore
from calorie_calculator.domain.models import User
from calorie_calculator.services.events import Observable

logger = logging.getLogger(__name__)

CURRENT_USER_KEY = "currentUser"
GUEST_MODE_KEY = "isGuestMode"
LAST_LOGIN_EMAIL_KEY = "lastLoginEmail"

DEFAULT_GUEST_GOAL = 2000

# Checked in order; the first pattern found in the lowercased message wins.
_ERROR_CATEGORIES: tuple[tuple[tuple[str, ...], str, str], ...] = (
    (("already",), "email_in_use", "This email address is already in use"),
    (
        ("incorrect", "invalid credentials"),
        "invalid_credentials",
        "Incorrect email address or password",
    ),
    (("required", "enter your"), "missing_fields", "Enter your email and password"),
    (("password",), "weak_password", "Password must be at least 6 characters"),
    (("email",), "invalid_email", "The email address is not valid"),
    (("network",), "network", "A network error occurred"),
)


class AuthError(Exception):
    """Authentication failure with a user-facing message."""

    def __init__(self, message: str, category: str = "unknown") -> None:
        super().__init__(message)
        self.message = message
        self.category = category


def to_auth_error(exc: Exception) -> AuthError:
    """Map an underlying failure to a user-facing AuthError."""
    raw = str(exc) or "An error occurred"
    lowered = raw.lower()
    for patterns, category, message in _ERROR_CATEGORIES:
        if any(pattern in lowered for pattern in patterns):
            return AuthError(message, category)
    return AuthError(raw)


@dataclass
class AuthService:
    """Tracks the current identity and tells observers when it changes."""

    api_client: ApiClient
    storage: KeyValueStore
    state: Observable[User | None] = field(default_factory=Observable)
    current_user: User | None = None

    def get_current_user(self) -> User | None:
        """Return the current identity, if any."""
        return self.current_user

    def is_guest_mode(self) -> bool:
        """Return True for a local-only guest identity."""
        return self.current_user is not None and self.current_user.is_guest

    def is_authenticated(self) -> bool:
        """Return True for a server-backed identity."""
        return self.current_user is not None and not self.current_user.is_guest

    def on_auth_state_changed(
        self, callback: Callable[[User | None], None]
    ) -> Callable[[], None]:
        """Register an observer, call it once with the stored state.

        Returns a function that removes the observer.
        """
        unsubscribe = self.state.subscribe(callback)
        self.restore()
        callback(self.current_user)
        return unsubscribe

    def restore(self) -> User | None:
        """Load the current identity from persistent storage."""
        try:
            token = self.storage.get_item(AUTH_TOKEN_KEY)
            user_json = self.storage.get_item(CURRENT_USER_KEY)
            is_guest = self.storage.get_item(GUEST_MODE_KEY) == "true"
            if user_json and (token or is_guest):
                self.current_user = User(**json.loads(user_json))
            else:
                self.current_user = None
        except (ValueError, TypeError):
            logger.exception("Failed to restore auth state")
            self.current_user = None
        return self.current_user

    def start_as_guest(self) -> User:
        """Create and persist a local-only guest identity."""
        millis = int(datetime.now(tz=UTC).timestamp() * 1000)
        guest = User(
            id=f"guest_{millis}",
            email="",
            display_name="Guest",
            is_guest=True,
            daily_calorie_goal=DEFAULT_GUEST_GOAL,
        )
        self._persist_user(guest)
        self.storage.set_item(GUEST_MODE_KEY, "true")
        self.current_user = guest
        self.state.notify(guest)
        return guest

    async def sign_in_with_email(self, email: str, password: str) -> User:
        """Sign in with an existing account."""
        try:
            response = await self.api_client.sign_in(email, password)
        except Exception as exc:
            raise to_auth_error(exc) from exc
        return self._complete_sign_in(response, email)

    async def sign_up_with_email(
        self, email: str, password: str, display_name: str | None = None
    ) -> User:
        """Create an account and sign in with it."""
        try:
            response = await self.api_client.sign_up(email, password, display_name)
        except Exception as exc:
            raise to_auth_error(exc) from exc
        return self._complete_sign_in(response, email)

    async def convert_guest_to_user(
        self, email: str, password: str, display_name: str | None = None
    ) -> User:
        """Register the guest as a real account.

        Pushing the guest's local data afterwards is up to the caller.
        """
        return await self.sign_up_with_email(email, password, display_name)

    async def sign_out(self) -> None:
        """Drop the session and identity."""
        if not self.is_guest_mode():
            try:
                await self.api_client.sign_out()
            except Exception as exc:
                raise to_auth_error(exc) from exc
        for key in (CURRENT_USER_KEY, GUEST_MODE_KEY, AUTH_TOKEN_KEY):
            self.storage.remove_item(key)
        self.current_user = None
        self.state.notify(None)
        logger.info("Signed out")

    def get_last_login_email(self) -> str | None:
        """Return the email used for the last successful sign-in."""
        return self.storage.get_item(LAST_LOGIN_EMAIL_KEY)

    def _complete_sign_in(self, response: dict[str, object], email: str) -> User:
        user = _user_from_payload(response.get("user"))
        self.storage.remove_item(GUEST_MODE_KEY)
        self._persist_user(user)
        self.storage.set_item(LAST_LOGIN_EMAIL_KEY, email)
        self.current_user = user
        self.state.notify(user)
        return user

    def _persist_user(self, user: User) -> None:
        self.storage.set_item(CURRENT_USER_KEY, json.dumps(asdict(user)))


def _user_from_payload(payload: object) -> User:
    if not isinstance(payload, dict) or not payload.get("id"):
        raise AuthError("The server returned an invalid user")
    goal = payload.get("dailyCalorieGoal")
    return User(
        id=str(payload["id"]),
        email=str(payload.get("email") or ""),
        display_name=str(payload.get("displayName") or ""),
        is_guest=False,
        daily_calorie_goal=int(goal) if isinstance(goal, int | float) else None,
    )
