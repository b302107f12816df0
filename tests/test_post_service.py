"""Integration tests for PostService: every operation is confined to the caller's posts."""

import unittest

from miniblog.core.errno import PostNotFoundError
from miniblog.schemas.post import (
    CreatePostRequest,
    DeletePostRequest,
    GetPostRequest,
    ListPostRequest,
    UpdatePostRequest,
)
from tests.support import ContainerTestCase


class TestPostService(ContainerTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.alice = self.create_user("alice")
        self.bob = self.create_user("bob")
        self.posts = self.container.services.post

    def _create(self, owner, title: str = "hello", content: str = "world") -> str:
        return self.posts.create(owner, CreatePostRequest(title=title, content=content)).post_id

    def test_create_and_get(self) -> None:
        post_id = self._create(self.alice)
        post = self.posts.get(self.alice, GetPostRequest(post_id=post_id)).post
        self.assertEqual((post.post_id, post.user_id, post.title), (post_id, self.alice.user_id, "hello"))

    def test_other_users_post_is_not_found(self) -> None:
        post_id = self._create(self.alice)
        with self.assertRaises(PostNotFoundError):
            self.posts.get(self.bob, GetPostRequest(post_id=post_id))
        with self.assertRaises(PostNotFoundError):
            self.posts.update(self.bob, UpdatePostRequest(post_id=post_id, title="hijacked"))
        self.assertEqual(self.posts.get(self.alice, GetPostRequest(post_id=post_id)).post.title, "hello")

    def test_update_keeps_omitted_fields(self) -> None:
        post_id = self._create(self.alice)
        self.posts.update(self.alice, UpdatePostRequest(post_id=post_id, title="updated"))
        post = self.posts.get(self.alice, GetPostRequest(post_id=post_id)).post
        self.assertEqual((post.title, post.content), ("updated", "world"))

    def test_delete_is_idempotent(self) -> None:
        post_id = self._create(self.alice)
        self.posts.delete(self.alice, DeletePostRequest(post_ids=[post_id]))
        self.posts.delete(self.alice, DeletePostRequest(post_ids=[post_id, "post-zzzzzz"]))
        with self.assertRaises(PostNotFoundError):
            self.posts.get(self.alice, GetPostRequest(post_id=post_id))

    def test_delete_ignores_other_users_posts(self) -> None:
        post_id = self._create(self.alice)
        self.posts.delete(self.bob, DeletePostRequest(post_ids=[post_id]))
        self.posts.get(self.alice, GetPostRequest(post_id=post_id))

    def test_list_is_scoped_and_paginated(self) -> None:
        for i in range(3):
            self._create(self.alice, title=f"alice {i}")
        self._create(self.bob, title="bob 0")
        rsp = self.posts.list(self.alice, ListPostRequest(offset=0, limit=2))
        self.assertEqual(rsp.total_count, 3)
        self.assertEqual([p.title for p in rsp.posts], ["alice 2", "alice 1"])

    def test_list_title_filter(self) -> None:
        self._create(self.alice, title="python tips")
        self._create(self.alice, title="go tips")
        rsp = self.posts.list(self.alice, ListPostRequest(offset=0, limit=10, title="python"))
        self.assertEqual([p.title for p in rsp.posts], ["python tips"])


if __name__ == "__main__":
    unittest.main()
