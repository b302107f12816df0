"""Post persistence."""

from miniblog.core import rid
from miniblog.core.errno import PostNotFoundError
from miniblog.models.post import Post
from miniblog.store.generic import GenericStore


class PostStore(GenericStore[Post]):
    model = Post
    not_found = PostNotFoundError
    resource_id = ("post_id", rid.POST)
