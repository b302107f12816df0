"""
Request-scoped metadata (request id, authenticated user, access token).

Values live in context variables so they follow a request through the call
chain of a single thread or task. Business code receives the acting user
explicitly as a Principal; the context is read by transports and logging.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass

_request_id: ContextVar[str] = ContextVar("miniblog_request_id", default="")
_user_id: ContextVar[str] = ContextVar("miniblog_user_id", default="")
_username: ContextVar[str] = ContextVar("miniblog_username", default="")
_access_token: ContextVar[str] = ContextVar("miniblog_access_token", default="")
_is_admin: ContextVar[bool] = ContextVar("miniblog_is_admin", default=False)

_VARS: dict[str, ContextVar] = {
    "request_id": _request_id,
    "user_id": _user_id,
    "username": _username,
    "access_token": _access_token,
    "is_admin": _is_admin,
}


@dataclass(frozen=True)
class Principal:
    """The authenticated caller on whose behalf an operation runs."""

    user_id: str
    username: str
    # True when the user holds role::admin in the casbin grants.
    is_admin: bool = False


def request_id() -> str:
    return _request_id.get()


def user_id() -> str:
    return _user_id.get()


def username() -> str:
    return _username.get()


def access_token() -> str:
    return _access_token.get()


def set_request_id(value: str) -> None:
    """Set the request id for the rest of the current context (HTTP middleware)."""
    _request_id.set(value)


def current_principal() -> Principal | None:
    """Principal bound by the authentication layer, or None for anonymous calls."""
    uid = _user_id.get()
    if not uid:
        return None
    return Principal(user_id=uid, username=_username.get(), is_admin=_is_admin.get())


@contextmanager
def bind(**values: object) -> Iterator[None]:
    """Bind request metadata for the duration of the block, restoring it on exit."""
    unknown = set(values) - set(_VARS)
    if unknown:
        raise TypeError(f"unknown context keys: {', '.join(sorted(unknown))}")
    tokens = [(_VARS[name], _VARS[name].set(value)) for name, value in values.items()]
    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)
