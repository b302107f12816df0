"""Post CRUD endpoints under /v1/posts. All operations act on the caller's own posts."""

from typing import Annotated

from fastapi import APIRouter, Query

from miniblog.api.deps import ContainerDep, CurrentUser
from miniblog.schemas.post import (
    CreatePostRequest,
    CreatePostResponse,
    DeletePostRequest,
    DeletePostResponse,
    GetPostRequest,
    GetPostResponse,
    ListPostRequest,
    ListPostResponse,
    UpdatePostRequest,
    UpdatePostResponse,
)

router = APIRouter()


@router.post("", response_model=CreatePostResponse)
def create_post(body: CreatePostRequest, principal: CurrentUser, container: ContainerDep) -> CreatePostResponse:
    container.validator.validate(principal, body)
    return container.services.post.create(principal, body)


@router.put("/{post_id}", response_model=UpdatePostResponse)
def update_post(
    post_id: str,
    body: UpdatePostRequest,
    principal: CurrentUser,
    container: ContainerDep,
) -> UpdatePostResponse:
    rq = body.model_copy(update={"post_id": post_id})
    container.validator.validate(principal, rq)
    return container.services.post.update(principal, rq)


@router.delete("", response_model=DeletePostResponse)
def delete_posts(body: DeletePostRequest, principal: CurrentUser, container: ContainerDep) -> DeletePostResponse:
    """Delete several posts at once; ids that do not exist are ignored."""
    container.validator.validate(principal, body)
    return container.services.post.delete(principal, body)


@router.get("/{post_id}", response_model=GetPostResponse)
def get_post(post_id: str, principal: CurrentUser, container: ContainerDep) -> GetPostResponse:
    rq = GetPostRequest(post_id=post_id)
    container.validator.validate(principal, rq)
    return container.services.post.get(principal, rq)


@router.get("", response_model=ListPostResponse)
def list_posts(
    rq: Annotated[ListPostRequest, Query()],
    principal: CurrentUser,
    container: ContainerDep,
) -> ListPostResponse:
    container.validator.validate(principal, rq)
    return container.services.post.list(principal, rq)
