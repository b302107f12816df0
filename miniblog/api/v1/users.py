"""User CRUD endpoints under /v1/users."""

from typing import Annotated

from fastapi import APIRouter, Query

from miniblog.api.deps import ContainerDep, CurrentUser
from miniblog.schemas.user import (
    CreateUserRequest,
    CreateUserResponse,
    DeleteUserRequest,
    DeleteUserResponse,
    GetUserRequest,
    GetUserResponse,
    ListUserRequest,
    ListUserResponse,
    UpdateUserRequest,
    UpdateUserResponse,
)

router = APIRouter()


@router.post("", response_model=CreateUserResponse)
def create_user(body: CreateUserRequest, container: ContainerDep) -> CreateUserResponse:
    """Sign up. No authentication required."""
    container.validator.validate(None, body)
    return container.services.user.create(body)


@router.put("/{user_id}", response_model=UpdateUserResponse)
def update_user(
    user_id: str,
    body: UpdateUserRequest,
    principal: CurrentUser,
    container: ContainerDep,
) -> UpdateUserResponse:
    rq = body.model_copy(update={"user_id": user_id})
    container.validator.validate(principal, rq)
    return container.services.user.update(principal, rq)


@router.delete("/{user_id}", response_model=DeleteUserResponse)
def delete_user(user_id: str, principal: CurrentUser, container: ContainerDep) -> DeleteUserResponse:
    """Delete a user (administrators only, enforced by policy)."""
    rq = DeleteUserRequest(user_id=user_id)
    container.validator.validate(principal, rq)
    return container.services.user.delete(principal, rq)


@router.get("/{user_id}", response_model=GetUserResponse)
def get_user(user_id: str, principal: CurrentUser, container: ContainerDep) -> GetUserResponse:
    rq = GetUserRequest(user_id=user_id)
    container.validator.validate(principal, rq)
    return container.services.user.get(principal, rq)


@router.get("", response_model=ListUserResponse)
def list_users(
    rq: Annotated[ListUserRequest, Query()],
    principal: CurrentUser,
    container: ContainerDep,
) -> ListUserResponse:
    """List users with post counts; non-administrators only see their own account."""
    container.validator.validate(principal, rq)
    return container.services.user.list(principal, rq)
