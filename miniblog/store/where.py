"""
Composable query conditions: equality filters, substring matches, pagination
and the owner (tenant) constraint.

Owner scoping is explicit: callers pass the acting user's id to with_tenant(),
so every scoped store call shows its authorization boundary at the call site.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Query
from sqlalchemy.sql.elements import ColumnElement

# Attribute holding the owning user's resource id on every tenant-scoped model.
TENANT_FIELD = "user_id"


class Where:
    """Accumulates conditions; methods return self so calls can be chained."""

    def __init__(self, **filters: Any) -> None:
        self.filters: dict[str, Any] = dict(filters)
        self.substrings: dict[str, str] = {}
        self.offset = 0
        self.limit = 0

    def filter(self, **filters: Any) -> Where:
        """Equality match; list, tuple or set values match any of their items."""
        self.filters.update(filters)
        return self

    def contains(self, field: str, text: str) -> Where:
        self.substrings[field] = text
        return self

    def paginate(self, offset: int, limit: int) -> Where:
        """limit <= 0 means no limit."""
        self.offset = max(0, offset)
        self.limit = max(0, limit)
        return self

    def with_tenant(self, user_id: str | None) -> Where:
        """Restrict rows to those owned by user_id; no-op when user_id is empty."""
        if user_id:
            self.filters[TENANT_FIELD] = user_id
        return self

    @property
    def tenant(self) -> str | None:
        return self.filters.get(TENANT_FIELD)

    def conditions(self, model: type) -> list[ColumnElement[bool]]:
        """SQL predicates for model. Unknown field names raise AttributeError."""
        clauses: list[ColumnElement[bool]] = []
        for field, value in self.filters.items():
            column = getattr(model, field)
            if isinstance(value, (list, tuple, set, frozenset)):
                clauses.append(column.in_(list(value)))
            else:
                clauses.append(column == value)
        for field, text in self.substrings.items():
            clauses.append(getattr(model, field).contains(text, autoescape=True))
        return clauses

    def apply(self, query: Query, model: type) -> Query:
        """Filter, order newest first, then paginate."""
        query = query.filter(*self.conditions(model)).order_by(model.id.desc())
        if self.offset:
            query = query.offset(self.offset)
        if self.limit:
            query = query.limit(self.limit)
        return query

    def __repr__(self) -> str:
        return (
            f"Where(filters={self.filters!r}, substrings={self.substrings!r}, "
            f"offset={self.offset}, limit={self.limit})"
        )
