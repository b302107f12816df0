"""Generic CRUD over one ORM model, translating database failures into the error taxonomy."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from miniblog.core import rid
from miniblog.core.errno import DBReadError, DBWriteError
from miniblog.core.errors import ErrorX, NotFoundError
from miniblog.store.where import Where

if TYPE_CHECKING:
    from miniblog.store import Datastore

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


class GenericStore(Generic[ModelT]):
    """
    Create, update, delete, get and list rows of one model.

    When resource_id is given as (attribute, prefix), create() writes a resource
    id derived from the new primary key in a second statement after the insert.
    """

    model: type[ModelT]
    not_found: type[ErrorX] = NotFoundError
    # Raised for unique-constraint violations on create/update.
    conflict: type[ErrorX] = DBWriteError
    resource_id: tuple[str, str] | None = None

    def __init__(self, ds: Datastore) -> None:
        self._ds = ds

    def create(self, obj: ModelT) -> ModelT:
        try:
            with self._ds.session() as db:
                db.add(obj)
                db.flush()
                if self.resource_id is not None:
                    attr, prefix = self.resource_id
                    setattr(obj, attr, rid.new(prefix, obj.id))
                    db.flush()
        except IntegrityError as e:
            logger.warning("Failed to insert %s: %s", self._name, e.orig)
            raise self.conflict() from e
        except SQLAlchemyError as e:
            logger.error("Failed to insert %s: %s", self._name, e)
            raise DBWriteError() from e
        return obj

    def update(self, obj: ModelT) -> ModelT:
        """Save every column of obj (full-record update)."""
        try:
            with self._ds.session() as db:
                merged = db.merge(obj)
                db.flush()
        except IntegrityError as e:
            logger.warning("Failed to update %s: %s", self._name, e.orig)
            raise self.conflict() from e
        except SQLAlchemyError as e:
            logger.error("Failed to update %s: %s", self._name, e)
            raise DBWriteError() from e
        return merged

    def delete(self, where: Where) -> int:
        """Delete matching rows. Matching nothing is not an error."""
        try:
            with self._ds.session() as db:
                deleted = (
                    db.query(self.model)
                    .filter(*where.conditions(self.model))
                    .delete(synchronize_session=False)
                )
        except SQLAlchemyError as e:
            logger.error("Failed to delete %s where %r: %s", self._name, where, e)
            raise DBWriteError() from e
        return deleted

    def get(self, where: Where) -> ModelT:
        try:
            with self._ds.session() as db:
                obj = where.apply(db.query(self.model), self.model).first()
        except SQLAlchemyError as e:
            logger.error("Failed to get %s where %r: %s", self._name, where, e)
            raise DBReadError() from e
        if obj is None:
            raise self.not_found()
        return obj

    def list(self, where: Where) -> tuple[int, list[ModelT]]:
        """Return (total matching rows ignoring pagination, the requested page)."""
        try:
            with self._ds.session() as db:
                total = db.query(self.model).filter(*where.conditions(self.model)).count()
                rows = where.apply(db.query(self.model), self.model).all()
        except SQLAlchemyError as e:
            logger.error("Failed to list %s where %r: %s", self._name, where, e)
            raise DBReadError() from e
        return total, rows

    def count(self, where: Where) -> int:
        try:
            with self._ds.session() as db:
                return db.query(self.model).filter(*where.conditions(self.model)).count()
        except SQLAlchemyError as e:
            logger.error("Failed to count %s where %r: %s", self._name, where, e)
            raise DBReadError() from e

    @property
    def _name(self) -> str:
        return getattr(self.model, "__tablename__", self.model.__name__)


def copy_fields(obj: Any, values: dict[str, Any]) -> None:
    """Assign every non-None value onto obj (partial updates)."""
    for key, value in values.items():
        if value is not None:
            setattr(obj, key, value)
