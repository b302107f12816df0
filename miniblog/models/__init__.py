"""SQLAlchemy ORM models."""

from miniblog.models.base import Base
from miniblog.models.post import Post
from miniblog.models.user import User

__all__ = ["Base", "Post", "User"]
