"""Request/response schemas for user endpoints (shared by the REST, gateway and gRPC transports)."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    """Public view of a user account (never includes the password hash)."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str = Field(..., description="Resource id, e.g. user-k3x9qa")
    username: str
    nickname: str = ""
    email: str = ""
    phone: str = ""
    post_count: int = Field(default=0, description="Number of posts owned by the user")
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CreateUserRequest(BaseModel):
    username: str = ""
    password: str = ""
    nickname: str | None = None
    email: str = ""
    phone: str = ""


class CreateUserResponse(BaseModel):
    user_id: str


class UpdateUserRequest(BaseModel):
    """Partial update; fields left as None are not changed."""

    user_id: str = ""
    username: str | None = None
    nickname: str | None = None
    email: str | None = None
    phone: str | None = None


class UpdateUserResponse(BaseModel):
    pass


class DeleteUserRequest(BaseModel):
    user_id: str = ""


class DeleteUserResponse(BaseModel):
    pass


class GetUserRequest(BaseModel):
    user_id: str = ""


class GetUserResponse(BaseModel):
    user: User


class ListUserRequest(BaseModel):
    offset: int = Field(default=0, ge=0)
    limit: int = 0


class ListUserResponse(BaseModel):
    total_count: int
    users: list[User]
