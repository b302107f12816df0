"""
HTTP/JSON gateway in front of the gRPC server (grpc-gateway mode).

Each REST route is forwarded to the matching RPC: path parameters, query
parameters and the JSON body are merged into one request message. The caller's
Authorization and X-Request-ID headers travel as gRPC metadata; gRPC errors are
rendered as the same JSON error bodies the REST mode uses.
"""

import logging
import uuid
from typing import Any

import grpc
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from miniblog.api.errors import error_response, register_exception_handlers
from miniblog.api.middleware import install_middleware
from miniblog.core import context
from miniblog.core.errors import BindError, ErrorX
from miniblog.rpc.codec import dumps, full_method, loads

logger = logging.getLogger(__name__)

# (HTTP method, path, RPC method)
ROUTES: tuple[tuple[str, str, str], ...] = (
    ("GET", "/healthz", "Healthz"),
    ("POST", "/login", "Login"),
    ("PUT", "/refresh-token", "RefreshToken"),
    ("PUT", "/v1/users/{user_id}/change-password", "ChangePassword"),
    ("POST", "/v1/users", "CreateUser"),
    ("PUT", "/v1/users/{user_id}", "UpdateUser"),
    ("DELETE", "/v1/users/{user_id}", "DeleteUser"),
    ("GET", "/v1/users/{user_id}", "GetUser"),
    ("GET", "/v1/users", "ListUser"),
    ("POST", "/v1/posts", "CreatePost"),
    ("PUT", "/v1/posts/{post_id}", "UpdatePost"),
    ("DELETE", "/v1/posts", "DeletePost"),
    ("GET", "/v1/posts/{post_id}", "GetPost"),
    ("GET", "/v1/posts", "ListPost"),
)

# Query parameters that repeat (?post_ids=a&post_ids=b).
REPEATED_PARAMS = frozenset({"post_ids"})


class Gateway:
    """Forwards HTTP requests to RPCs over one shared channel."""

    def __init__(self, channel: grpc.Channel, timeout: float | None = None) -> None:
        self._channel = channel
        self._timeout = timeout

    def call(self, method: str, payload: dict[str, Any], authorization: str | None) -> dict[str, Any]:
        metadata = [("x-request-id", context.request_id() or str(uuid.uuid4()))]
        if authorization:
            metadata.append(("authorization", authorization))
        stub = self._channel.unary_unary(
            full_method(method),
            request_serializer=dumps,
            response_deserializer=loads,
        )
        response, _ = stub.with_call(payload, metadata=metadata, timeout=self._timeout)
        return response

    def close(self) -> None:
        self._channel.close()


async def _payload(request: Request) -> dict[str, Any]:
    payload: dict[str, Any] = {}
    for key in request.query_params:
        values = request.query_params.getlist(key)
        payload[key] = values if key in REPEATED_PARAMS else values[-1]
    body = await request.body()
    if body:
        try:
            data = await request.json()
        except ValueError as e:
            raise BindError().with_message("request body is not valid JSON") from e
        if not isinstance(data, dict):
            raise BindError().with_message("request body must be a JSON object")
        payload.update(data)
    payload.update(request.path_params)
    return payload


def _make_endpoint(gateway: Gateway, method: str):
    async def endpoint(request: Request) -> JSONResponse:
        try:
            payload = await _payload(request)
        except ErrorX as e:
            return error_response(e)
        authorization = request.headers.get("authorization")
        try:
            # The channel call blocks; keep it off the event loop.
            body = await run_in_threadpool(gateway.call, method, payload, authorization)
        except grpc.RpcError as e:
            return error_response(ErrorX.from_error(e))
        return JSONResponse(body)

    endpoint.__name__ = f"gateway_{method}"
    return endpoint


def create_gateway_app(gateway: Gateway, *, use_tls: bool = False) -> FastAPI:
    """FastAPI app exposing the REST surface backed by the gRPC service."""
    app = FastAPI(title="MiniBlog Gateway", version="1.0.0", docs_url=None, redoc_url=None)
    install_middleware(app, use_tls=use_tls)
    register_exception_handlers(app)
    for http_method, path, rpc in ROUTES:
        app.add_api_route(path, _make_endpoint(gateway, rpc), methods=[http_method])
    app.state.gateway = gateway
    return app
