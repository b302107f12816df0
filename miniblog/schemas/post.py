"""Request/response schemas for post endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Post(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    post_id: str = Field(..., description="Resource id, e.g. post-2x0b7c")
    user_id: str = Field(..., description="Owner's user id")
    title: str
    content: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CreatePostRequest(BaseModel):
    title: str = ""
    content: str = ""


class CreatePostResponse(BaseModel):
    post_id: str


class UpdatePostRequest(BaseModel):
    """Partial update; fields left as None are not changed."""

    post_id: str = ""
    title: str | None = None
    content: str | None = None


class UpdatePostResponse(BaseModel):
    pass


class DeletePostRequest(BaseModel):
    post_ids: list[str] = Field(default_factory=list)


class DeletePostResponse(BaseModel):
    pass


class GetPostRequest(BaseModel):
    post_id: str = ""


class GetPostResponse(BaseModel):
    post: Post


class ListPostRequest(BaseModel):
    offset: int = Field(default=0, ge=0)
    limit: int = 0
    title: str | None = Field(default=None, description="Only posts whose title contains this text")


class ListPostResponse(BaseModel):
    total_count: int
    posts: list[Post]
