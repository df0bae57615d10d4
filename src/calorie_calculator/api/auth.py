"""Authentication endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, Request, status

from calorie_calculator.api.schemas import (
    ChangePasswordRequest,
    SignInRequest,
    SignUpRequest,
    account_to_payload,
)
from calorie_calculator.services.errors import UnauthorizedError

if TYPE_CHECKING:
    from calorie_calculator.containers import AppContainer

router = APIRouter(prefix="/auth", tags=["auth"])


async def require_bearer_token(authorization: str | None = Header(default=None)) -> str:
    """Return the bearer token from the Authorization header."""
    if not authorization or not authorization.startswith("Bearer "):
        raise UnauthorizedError("Authentication token is required")
    return authorization[len("Bearer ") :]


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def sign_up(body: SignUpRequest, request: Request) -> dict[str, object]:
    """Register an account and return a token."""
    container: AppContainer = request.app.state.container
    result = container.account_service.sign_up(
        body.email, body.password, body.displayName
    )
    return {
        "message": "Registration complete",
        "token": result.token,
        "user": account_to_payload(result.account),
    }


@router.post("/signin")
async def sign_in(body: SignInRequest, request: Request) -> dict[str, object]:
    """Check credentials and return a token."""
    container: AppContainer = request.app.state.container
    result = container.account_service.sign_in(body.email, body.password)
    return {
        "message": "Signed in",
        "token": result.token,
        "user": account_to_payload(result.account),
    }


@router.get("/me")
async def current_user(
    request: Request, token: str = Depends(require_bearer_token)
) -> dict[str, object]:
    """Return the account that owns the bearer token."""
    container: AppContainer = request.app.state.container
    account = container.account_service.get_account(token)
    return {"user": account_to_payload(account)}


@router.post("/change-password")
async def change_password(
    body: ChangePasswordRequest,
    request: Request,
    token: str = Depends(require_bearer_token),
) -> dict[str, str]:
    """Replace the password of the token's account."""
    container: AppContainer = request.app.state.container
    container.account_service.change_password(
        token, body.currentPassword, body.newPassword
    )
    return {"message": "Password changed"}
