"""Password hashing and bearer-token signing/verification."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

JWT_ALGORITHM = "HS256"
BEARER_PREFIX = "bearer "


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


class InvalidTokenError(Exception):
    """Raised when a bearer token is missing, malformed, expired or wrongly signed."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


@dataclass(frozen=True)
class TokenIssuer:
    """
    Signs and parses HS256 tokens whose identity claim holds a user id.

    Configuration is fixed at construction; build one per process at startup
    and pass it to the components that need it.
    """

    key: str
    identity_key: str = "identityKey"
    expiration: timedelta = timedelta(hours=2)

    def sign(self, identity: str) -> tuple[str, datetime]:
        """Return (token, expire_at) for the given user id."""
        now = datetime.now(UTC).replace(microsecond=0)
        expire_at = now + self.expiration
        payload: dict[str, Any] = {
            self.identity_key: identity,
            "nbf": now,
            "iat": now,
            "exp": expire_at,
        }
        token = jwt.encode(payload, self.key, algorithm=JWT_ALGORITHM)
        return token, expire_at

    def parse(self, token: str) -> str:
        """Return the user id carried by token. Raises InvalidTokenError."""
        if not token:
            raise InvalidTokenError("token is empty")
        try:
            claims = jwt.decode(token, self.key, algorithms=[JWT_ALGORITHM])
        except jwt.PyJWTError as e:
            raise InvalidTokenError(str(e) or type(e).__name__) from e
        identity = claims.get(self.identity_key)
        if not isinstance(identity, str) or not identity:
            raise InvalidTokenError("token does not carry an identity")
        return identity

    def parse_request(self, request: Any) -> str:
        """
        Extract and parse the bearer token of an inbound call: the Authorization
        header of an HTTP request, or the authorization metadata of a gRPC call.
        """
        return self.parse(bearer_token(request))


def bearer_token(request: Any) -> str:
    """Bearer credential of an HTTP request (has .headers) or gRPC servicer context."""
    if hasattr(request, "invocation_metadata"):
        metadata = {k.lower(): v for k, v in request.invocation_metadata() or ()}
        header = metadata.get("authorization", "")
    elif hasattr(request, "headers"):
        header = _header(request.headers, "authorization")
    else:
        raise InvalidTokenError("unsupported request type")
    if not header:
        raise InvalidTokenError("the length of the `Authorization` header is zero")
    if not header.lower().startswith(BEARER_PREFIX):
        raise InvalidTokenError("the `Authorization` header must use the Bearer scheme")
    return header[len(BEARER_PREFIX):].strip()


def _header(headers: Mapping[str, str], name: str) -> str:
    value = headers.get(name)
    if value is None:
        value = headers.get(name.title(), "")
    return value
