"""Pydantic request/response schemas."""

from miniblog.schemas.auth import (
    ChangePasswordRequest,
    ChangePasswordResponse,
    LoginRequest,
    LoginResponse,
    RefreshTokenRequest,
    RefreshTokenResponse,
)
from miniblog.schemas.health import HealthzRequest, HealthzResponse
from miniblog.schemas.post import (
    CreatePostRequest,
    CreatePostResponse,
    DeletePostRequest,
    DeletePostResponse,
    GetPostRequest,
    GetPostResponse,
    ListPostRequest,
    ListPostResponse,
    Post,
    UpdatePostRequest,
    UpdatePostResponse,
)
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
    User,
)

__all__ = [
    "ChangePasswordRequest",
    "ChangePasswordResponse",
    "CreatePostRequest",
    "CreatePostResponse",
    "CreateUserRequest",
    "CreateUserResponse",
    "DeletePostRequest",
    "DeletePostResponse",
    "DeleteUserRequest",
    "DeleteUserResponse",
    "GetPostRequest",
    "GetPostResponse",
    "GetUserRequest",
    "GetUserResponse",
    "HealthzRequest",
    "HealthzResponse",
    "ListPostRequest",
    "ListPostResponse",
    "ListUserRequest",
    "ListUserResponse",
    "LoginRequest",
    "LoginResponse",
    "Post",
    "RefreshTokenRequest",
    "RefreshTokenResponse",
    "UpdatePostRequest",
    "UpdatePostResponse",
    "UpdateUserRequest",
    "UpdateUserResponse",
    "User",
]
