"""
Server interceptors, outermost first: request id, error mapping,
authentication, authorization.

Inner layers report failures by raising ErrorX; only ErrorInterceptor aborts
the RPC, so each call is aborted exactly once with the right status.
"""

import logging
import uuid
from collections.abc import Callable
from typing import Any

import grpc

from miniblog.core import context as ctx
from miniblog.core.authn import authenticate
from miniblog.core.authz import Authorizer
from miniblog.core.errors import ErrorX, InternalError
from miniblog.core.security import TokenIssuer
from miniblog.rpc.codec import method_name
from miniblog.rpc.service import PUBLIC_METHODS
from miniblog.store import Datastore

logger = logging.getLogger(__name__)

REQUEST_ID_METADATA = "x-request-id"

Behavior = Callable[[Any, grpc.ServicerContext], Any]


def _wrap(handler: grpc.RpcMethodHandler | None, wrap: Callable[[Behavior], Behavior]):
    if handler is None or handler.unary_unary is None:
        return handler
    return grpc.unary_unary_rpc_method_handler(
        wrap(handler.unary_unary),
        request_deserializer=handler.request_deserializer,
        response_serializer=handler.response_serializer,
    )


def _metadata(context: grpc.ServicerContext) -> dict[str, str]:
    return {k.lower(): v for k, v in context.invocation_metadata() or ()}


def _is_public(handler_call_details: grpc.HandlerCallDetails) -> bool:
    return method_name(handler_call_details.method or "") in PUBLIC_METHODS


class RequestIDInterceptor(grpc.ServerInterceptor):
    """Use the caller's x-request-id (or a new uuid4), bind it and echo it back."""

    def intercept_service(self, continuation, handler_call_details):
        def wrap(inner: Behavior) -> Behavior:
            def behavior(request, context):
                request_id = _metadata(context).get(REQUEST_ID_METADATA) or str(uuid.uuid4())
                context.send_initial_metadata(((REQUEST_ID_METADATA, request_id),))
                with ctx.bind(request_id=request_id):
                    return inner(request, context)

            return behavior

        return _wrap(continuation(handler_call_details), wrap)


class ErrorInterceptor(grpc.ServerInterceptor):
    """Abort with the status of a raised ErrorX; anything else becomes INTERNAL."""

    def intercept_service(self, continuation, handler_call_details):
        method = handler_call_details.method

        def wrap(inner: Behavior) -> Behavior:
            def behavior(request, context):
                try:
                    return inner(request, context)
                except ErrorX as e:
                    err = e
                    logger.debug("%s failed: %s", method, err)
                except Exception:
                    logger.exception("Unhandled error in %s", method)
                    err = InternalError()
                context.abort_with_status(err.with_request_id(ctx.request_id()).grpc_status())

            return behavior

        return _wrap(continuation(handler_call_details), wrap)


class AuthnInterceptor(grpc.ServerInterceptor):
    """Require a valid bearer token and bind the caller to the request context."""

    def __init__(self, tokens: TokenIssuer, ds: Datastore, authz: Authorizer) -> None:
        self._tokens = tokens
        self._ds = ds
        self._authz = authz

    def intercept_service(self, continuation, handler_call_details):
        handler = continuation(handler_call_details)
        if _is_public(handler_call_details):
            return handler

        def wrap(inner: Behavior) -> Behavior:
            def behavior(request, context):
                principal, token = authenticate(self._tokens, self._ds, self._authz, context)
                with ctx.bind(
                    user_id=principal.user_id,
                    username=principal.username,
                    is_admin=principal.is_admin,
                    access_token=token,
                ):
                    return inner(request, context)

            return behavior

        return _wrap(handler, wrap)


class AuthzInterceptor(grpc.ServerInterceptor):
    """Check casbin: subject = user id, object = full method name, action = CALL."""

    ACTION = "CALL"

    def __init__(self, authz: Authorizer) -> None:
        self._authz = authz

    def intercept_service(self, continuation, handler_call_details):
        handler = continuation(handler_call_details)
        if _is_public(handler_call_details):
            return handler
        method = handler_call_details.method

        def wrap(inner: Behavior) -> Behavior:
            def behavior(request, context):
                self._authz.require(ctx.user_id(), method, self.ACTION)
                return inner(request, context)

            return behavior

        return _wrap(handler, wrap)
