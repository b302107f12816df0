"""Field rule helpers shared by the per-resource validators."""

import re
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel

from miniblog.core.context import Principal
from miniblog.core.errors import InvalidArgumentError, PermissionDeniedError

Rules = dict[str, Callable[[Any], None]]

_EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
_PHONE_RE = re.compile(r"^1[3-9]\d{9}$")
_LETTER_RE = re.compile(r"[A-Za-z]")
_DIGIT_RE = re.compile(r"\d")

PASSWORD_MIN_LEN = 6


def invalid(message: str) -> InvalidArgumentError:
    return InvalidArgumentError().with_message(message)


def not_empty(field: str) -> Callable[[Any], None]:
    def check(value: Any) -> None:
        if not value:
            raise invalid(f"{field} cannot be empty")

    return check


def check_password(value: str) -> None:
    if not value:
        raise invalid("password cannot be empty")
    if len(value) < PASSWORD_MIN_LEN:
        raise invalid(f"password must be at least {PASSWORD_MIN_LEN} characters long")
    if not _LETTER_RE.search(value):
        raise invalid("password must contain at least one letter")
    if not _DIGIT_RE.search(value):
        raise invalid("password must contain at least one number")


def check_email(value: str) -> None:
    if not value:
        raise invalid("email cannot be empty")
    if not _EMAIL_RE.match(value):
        raise invalid("invalid email format")


def check_phone(value: str) -> None:
    if not value:
        raise invalid("phone cannot be empty")
    if not _PHONE_RE.match(value):
        raise invalid("invalid phone format")


def check_limit(value: int) -> None:
    if value <= 0:
        raise invalid("limit must be greater than 0")


def require_self(principal: Principal | None, user_id: str) -> None:
    """The user id in the request path must be the caller's own."""
    caller = principal.user_id if principal is not None else ""
    if user_id != caller:
        raise PermissionDeniedError().with_message(
            "The logged-in user `%s` does not match request user `%s`", caller, user_id
        )


def validate_all_fields(obj: BaseModel, rules: Rules) -> None:
    """Apply the rule of every declared field that has one."""
    for name in type(obj).model_fields:
        _check(obj, rules, name)


def validate_selected_fields(obj: BaseModel, rules: Rules, *fields: str) -> None:
    """Apply rules only to the named fields; names the model does not declare are ignored."""
    declared = type(obj).model_fields
    for name in fields:
        if name in declared:
            _check(obj, rules, name)


def _check(obj: BaseModel, rules: Rules, name: str) -> None:
    rule = rules.get(name)
    if rule is None:
        return
    value = getattr(obj, name)
    if value is None:
        return
    rule(value)
