"""ORM model for blog users."""

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Integer, String, func

from miniblog.models.base import Base


def _utcnow() -> datetime:
    return datetime.now(UTC)


class User(Base):
    """
    User account. user_id is the public resource id ("user-xxxxxx"), written
    after insert from the autoincrement primary key.

    password holds a bcrypt hash, never the plain text.
    """

    __tablename__ = "user"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column("userID", String(36), nullable=True, unique=True, index=True)
    username = Column(String(255), nullable=False, unique=True, index=True)
    password = Column(String(255), nullable=False)
    nickname = Column(String(30), nullable=False, default="")
    email = Column(String(256), nullable=False, default="")
    phone = Column(String(16), nullable=False, unique=True, index=True)
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
