"""Resolve the caller of an HTTP request or gRPC call from its bearer token."""

import logging
from typing import Any

from miniblog.core.authz import Authorizer
from miniblog.core.context import Principal
from miniblog.core.errno import TokenInvalidError
from miniblog.core.errors import ErrorX, OperationFailedError, UnauthenticatedError
from miniblog.core.security import InvalidTokenError, TokenIssuer, bearer_token
from miniblog.store import Datastore, Where

logger = logging.getLogger(__name__)


def authenticate(tokens: TokenIssuer, ds: Datastore, authz: Authorizer, request: Any) -> tuple[Principal, str]:
    """
    Return (principal, raw token) for the request. The token must be valid and
    its user must still exist. Administrator status comes from the user's role grants.
    """
    try:
        token = bearer_token(request)
        user_id = tokens.parse(token)
    except InvalidTokenError as e:
        raise TokenInvalidError().with_message(e.message) from e

    try:
        user = ds.user().get(Where(user_id=user_id))
    except ErrorX as e:
        logger.info("Authenticated token refers to unknown user %s: %s", user_id, e.message)
        raise UnauthenticatedError().with_message(e.message) from e

    try:
        is_admin = authz.is_admin(user.user_id)
    except Exception as e:
        logger.error("Failed to look up roles of %s: %s", user.user_id, e)
        raise OperationFailedError().with_message("authorization could not be evaluated") from e
    return Principal(user_id=user.user_id, username=user.username, is_admin=is_admin), token
