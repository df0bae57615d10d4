"""Account registration, sign-in and bearer tokens."""

import logging
import re
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol
from uuid import uuid4

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from calorie_calculator.domain.remote import AccountRecord
from calorie_calculator.services.errors import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6
DEFAULT_CALORIE_GOAL = 2000


def default_password_context() -> CryptContext:
    """Return the password hashing context."""
    return CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class AccountRepository(Protocol):
    """Persistence interface for accounts."""

    def get_by_email(self, email: str) -> AccountRecord | None:
        """Return the account for an email, if present."""

    def get_by_id(self, user_id: str) -> AccountRecord | None:
        """Return the account for an id, if present."""

    def create_account(self, account: AccountRecord) -> None:
        """Store a new account."""

    def update_account(self, user_id: str, fields: dict[str, object]) -> None:
        """Update columns on an account."""


@dataclass
class TokenIssuer:
    """Creates and verifies signed bearer tokens."""

    secret: str
    algorithm: str = "HS256"
    expires_days: int = 7

    def issue(self, user_id: str, email: str) -> str:
        """Return a signed token for the account."""
        expires_at = datetime.now(tz=UTC) + timedelta(days=self.expires_days)
        return jwt.encode(
            {"userId": user_id, "email": email, "exp": expires_at},
            self.secret,
            algorithm=self.algorithm,
        )

    def verify(self, token: str) -> dict[str, object]:
        """Return the token claims or raise UnauthorizedError."""
        try:
            claims = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError as exc:
            raise UnauthorizedError("Authentication token has expired") from exc
        except JWTError as exc:
            raise UnauthorizedError("Authentication token is invalid") from exc
        if not claims.get("userId"):
            raise UnauthorizedError("Authentication token is invalid")
        return claims


@dataclass(frozen=True)
class AuthResult:
    """Token and account returned after sign-up or sign-in."""

    token: str
    account: AccountRecord


@dataclass
class AccountService:
    """Server-side account operations."""

    repository: AccountRepository
    tokens: TokenIssuer
    passwords: CryptContext = field(default_factory=default_password_context)

    def sign_up(
        self, email: str | None, password: str | None, display_name: str | None
    ) -> AuthResult:
        """Register a new account and return a token for it."""
        if not email or not password:
            raise BadRequestError("Email and password are required")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise BadRequestError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )
        if not EMAIL_PATTERN.match(email):
            raise BadRequestError("Enter a valid email address")
        if self.repository.get_by_email(email) is not None:
            raise ConflictError("This email address is already registered")

        now = datetime.now(tz=UTC)
        account = AccountRecord(
            id=str(uuid4()),
            email=email,
            display_name=display_name or email.split("@")[0],
            password_hash=self.passwords.hash(password),
            daily_calorie_goal=DEFAULT_CALORIE_GOAL,
            created_at=now,
            updated_at=now,
        )
        self.repository.create_account(account)
        logger.info("Account created", extra={"user_id": account.id})
        return AuthResult(token=self.tokens.issue(account.id, email), account=account)

    def sign_in(self, email: str | None, password: str | None) -> AuthResult:
        """Check credentials and return a fresh token."""
        if not email or not password:
            raise BadRequestError("Enter your email and password")
        account = self.repository.get_by_email(email)
        if account is None or not self.passwords.verify(
            password, account.password_hash
        ):
            raise UnauthorizedError("Incorrect email or password")
        now = datetime.now(tz=UTC)
        self.repository.update_account(
            account.id, {"last_login_at": now, "updated_at": now}
        )
        return AuthResult(token=self.tokens.issue(account.id, email), account=account)

    def get_account(self, token: str) -> AccountRecord:
        """Return the account that owns a token."""
        claims = self.tokens.verify(token)
        account = self.repository.get_by_id(str(claims["userId"]))
        if account is None:
            raise NotFoundError("User not found")
        return account

    def change_password(
        self, token: str, current_password: str | None, new_password: str | None
    ) -> None:
        """Replace the password after checking the current one."""
        claims = self.tokens.verify(token)
        if not current_password or not new_password:
            raise BadRequestError("Enter your current and new password")
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise BadRequestError(
                f"New password must be at least {MIN_PASSWORD_LENGTH} characters"
            )
        account = self.repository.get_by_id(str(claims["userId"]))
        if account is None:
            raise NotFoundError("User not found")
        if not self.passwords.verify(current_password, account.password_hash):
            raise UnauthorizedError("Current password is incorrect")
        self.repository.update_account(
            account.id,
            {
                "password_hash": self.passwords.hash(new_password),
                "updated_at": datetime.now(tz=UTC),
            },
        )
