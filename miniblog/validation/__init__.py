"""
Request validation run before business logic.

Each resource declares a rule map (field name -> check). A check raises an
ErrorX subclass on failure and returns None otherwise. Fields without a rule,
and fields whose value is None (not supplied), are skipped.
"""

import re

from pydantic import BaseModel

from miniblog.core.context import Principal
from miniblog.validation.post import PostValidation
from miniblog.validation.rules import Rules, validate_all_fields, validate_selected_fields
from miniblog.validation.user import UserValidation

__all__ = [
    "Rules",
    "Validator",
    "validate_all_fields",
    "validate_selected_fields",
]

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


class Validator(UserValidation, PostValidation):
    """
    Dispatches a request to validate_<request type in snake_case>, e.g.
    CreateUserRequest -> validate_create_user_request. Request types with no
    such method pass unchecked.
    """

    def validate(self, principal: Principal | None, rq: BaseModel) -> None:
        method = getattr(self, "validate_" + _snake_case(type(rq).__name__), None)
        if method is not None:
            method(principal, rq)


def _snake_case(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()
