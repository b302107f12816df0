"""
Data access: per-resource stores sharing one engine, with transaction scoping.

Datastore.tx(fn) runs fn inside a single transaction. Stores called from fn
(directly or through the service layer) pick the bound session up from a
context variable, so they join the transaction instead of opening their own.
Outside tx() every store call runs in its own short transaction.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TypeVar

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from miniblog.core.database import check_db_connected, create_session_factory
from miniblog.core.errno import DBWriteError
from miniblog.store.post import PostStore
from miniblog.store.user import UserStore
from miniblog.store.where import Where

logger = logging.getLogger(__name__)

T = TypeVar("T")

__all__ = ["Datastore", "PostStore", "UserStore", "Where"]


class Datastore:
    """Entry point to the stores; construct one per process and pass it down."""

    def __init__(self, engine: Engine, session_factory: sessionmaker[Session] | None = None) -> None:
        self.engine = engine
        self._session_factory = session_factory or create_session_factory(engine)
        self._bound: ContextVar[Session | None] = ContextVar(
            f"miniblog_tx_{id(self)}", default=None
        )
        self._users = UserStore(self)
        self._posts = PostStore(self)

    def user(self) -> UserStore:
        return self._users

    def post(self) -> PostStore:
        return self._posts

    @contextmanager
    def session(self) -> Iterator[Session]:
        """
        Yield the transaction-bound session if one is active; otherwise a new
        session that commits on success and rolls back on error.
        """
        bound = self._bound.get()
        if bound is not None:
            yield bound
            return
        db = self._session_factory()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def tx(self, fn: Callable[[], T]) -> T:
        """Run fn in one transaction: commit if it returns, roll back if it raises."""
        if self._bound.get() is not None:
            return fn()
        db = self._session_factory()
        token = self._bound.set(db)
        try:
            result = fn()
            db.commit()
            return result
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Transaction failed: %s", e)
            raise DBWriteError() from e
        except Exception:
            db.rollback()
            raise
        finally:
            self._bound.reset(token)
            db.close()

    def ping(self) -> bool:
        db = self._session_factory()
        try:
            return check_db_connected(db)
        finally:
            db.close()

    def close(self) -> None:
        self.engine.dispose()
