"""Login, token refresh and password change endpoints."""

from fastapi import APIRouter

from miniblog.api.deps import ContainerDep, CurrentUser
from miniblog.schemas.auth import (
    ChangePasswordRequest,
    ChangePasswordResponse,
    LoginRequest,
    LoginResponse,
    RefreshTokenRequest,
    RefreshTokenResponse,
)

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
def login(body: LoginRequest, container: ContainerDep) -> LoginResponse:
    """
    Authenticate with username and password; returns a JWT access token.
    Include the token in the Authorization header as: Bearer <token>
    """
    container.validator.validate(None, body)
    return container.services.user.login(body)


@router.put("/refresh-token", response_model=RefreshTokenResponse)
def refresh_token(principal: CurrentUser, container: ContainerDep) -> RefreshTokenResponse:
    """Issue a fresh token for the authenticated user."""
    rq = RefreshTokenRequest()
    container.validator.validate(principal, rq)
    return container.services.user.refresh_token(principal, rq)


@router.put("/v1/users/{user_id}/change-password", response_model=ChangePasswordResponse)
def change_password(
    user_id: str,
    body: ChangePasswordRequest,
    principal: CurrentUser,
    container: ContainerDep,
) -> ChangePasswordResponse:
    rq = body.model_copy(update={"user_id": user_id})
    container.validator.validate(principal, rq)
    return container.services.user.change_password(principal, rq)
