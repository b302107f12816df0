"""Post business logic. Every operation is restricted to the caller's own posts."""

import logging

from miniblog.core.context import Principal
from miniblog.models.post import Post as PostModel
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
from miniblog.store import Datastore, Where
from miniblog.store.generic import copy_fields

logger = logging.getLogger(__name__)


class PostService:
    def __init__(self, ds: Datastore) -> None:
        self._ds = ds

    def create(self, principal: Principal, rq: CreatePostRequest) -> CreatePostResponse:
        post = PostModel(user_id=principal.user_id, title=rq.title, content=rq.content)
        self._ds.post().create(post)
        logger.info("Created post %s for %s", post.post_id, principal.user_id)
        return CreatePostResponse(post_id=post.post_id)

    def update(self, principal: Principal, rq: UpdatePostRequest) -> UpdatePostResponse:
        post = self._ds.post().get(Where(post_id=rq.post_id).with_tenant(principal.user_id))
        copy_fields(post, {"title": rq.title, "content": rq.content})
        self._ds.post().update(post)
        return UpdatePostResponse()

    def delete(self, principal: Principal, rq: DeletePostRequest) -> DeletePostResponse:
        """Delete the listed posts the caller owns; unknown or foreign ids are ignored."""
        deleted = self._ds.post().delete(Where(post_id=list(rq.post_ids)).with_tenant(principal.user_id))
        logger.debug("Deleted %d of %d posts for %s", deleted, len(rq.post_ids), principal.user_id)
        return DeletePostResponse()

    def get(self, principal: Principal, rq: GetPostRequest) -> GetPostResponse:
        post = self._ds.post().get(Where(post_id=rq.post_id).with_tenant(principal.user_id))
        return GetPostResponse(post=Post.model_validate(post))

    def list(self, principal: Principal, rq: ListPostRequest) -> ListPostResponse:
        whr = Where().with_tenant(principal.user_id).paginate(rq.offset, rq.limit)
        if rq.title:
            whr.contains("title", rq.title)
        total, posts = self._ds.post().list(whr)
        return ListPostResponse(total_count=total, posts=[Post.model_validate(p) for p in posts])
