"""ORM model for blog posts."""

from sqlalchemy import Column, DateTime, Integer, String, Text, func

from miniblog.models.base import Base
from miniblog.models.user import _utcnow


class Post(Base):
    """Blog post owned by the user whose resource id is stored in user_id."""

    __tablename__ = "post"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column("userID", String(36), nullable=False, index=True)
    post_id = Column("postID", String(35), nullable=True, unique=True, index=True)
    title = Column(String(256), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(
        "createdAt",
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
    )
    updated_at = Column(
        "updatedAt",
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=func.now(),
    )
