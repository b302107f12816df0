"""MiniBlog gRPC servicer: decodes requests, validates them and calls the business layer."""

import logging
import threading
from collections.abc import Callable
from datetime import datetime
from typing import Any

import grpc
from pydantic import BaseModel, ValidationError

from miniblog.core import context as ctx
from miniblog.core.context import Principal
from miniblog.core.errors import UnauthenticatedError, bind_error
from miniblog.rpc.codec import SERVICE_NAME, serialize
from miniblog.schemas import (
    ChangePasswordRequest,
    ChangePasswordResponse,
    CreatePostRequest,
    CreatePostResponse,
    CreateUserRequest,
    CreateUserResponse,
    DeletePostRequest,
    DeletePostResponse,
    DeleteUserRequest,
    DeleteUserResponse,
    GetPostRequest,
    GetPostResponse,
    GetUserRequest,
    GetUserResponse,
    HealthzRequest,
    HealthzResponse,
    ListPostRequest,
    ListPostResponse,
    ListUserRequest,
    ListUserResponse,
    LoginRequest,
    LoginResponse,
    RefreshTokenRequest,
    RefreshTokenResponse,
    UpdatePostRequest,
    UpdatePostResponse,
    UpdateUserRequest,
    UpdateUserResponse,
)
from miniblog.services import Services
from miniblog.store import Datastore
from miniblog.validation import Validator

logger = logging.getLogger(__name__)

# Methods callable without a bearer token.
PUBLIC_METHODS = frozenset({"Healthz", "Login", "CreateUser"})

# Method name -> request type.
METHODS: dict[str, type[BaseModel]] = {
    "Healthz": HealthzRequest,
    "Login": LoginRequest,
    "RefreshToken": RefreshTokenRequest,
    "ChangePassword": ChangePasswordRequest,
    "CreateUser": CreateUserRequest,
    "UpdateUser": UpdateUserRequest,
    "DeleteUser": DeleteUserRequest,
    "GetUser": GetUserRequest,
    "ListUser": ListUserRequest,
    "CreatePost": CreatePostRequest,
    "UpdatePost": UpdatePostRequest,
    "DeletePost": DeletePostRequest,
    "GetPost": GetPostRequest,
    "ListPost": ListPostRequest,
}


def _principal() -> Principal:
    principal = ctx.current_principal()
    if principal is None:
        raise UnauthenticatedError()
    return principal


class MiniBlogServicer:
    """One method per RPC; each takes the decoded request and the servicer context."""

    def __init__(self, services: Services, ds: Datastore) -> None:
        self._services = services
        self._ds = ds

    def Healthz(self, rq: HealthzRequest, context: grpc.ServicerContext) -> HealthzResponse:
        logger.info("Healthz handler is called")
        return HealthzResponse(
            status="Healthy",
            timestamp=datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        )

    def Login(self, rq: LoginRequest, context: grpc.ServicerContext) -> LoginResponse:
        return self._services.user.login(rq)

    def RefreshToken(self, rq: RefreshTokenRequest, context: grpc.ServicerContext) -> RefreshTokenResponse:
        return self._services.user.refresh_token(_principal(), rq)

    def ChangePassword(self, rq: ChangePasswordRequest, context: grpc.ServicerContext) -> ChangePasswordResponse:
        return self._services.user.change_password(_principal(), rq)

    def CreateUser(self, rq: CreateUserRequest, context: grpc.ServicerContext) -> CreateUserResponse:
        return self._services.user.create(rq)

    def UpdateUser(self, rq: UpdateUserRequest, context: grpc.ServicerContext) -> UpdateUserResponse:
        return self._services.user.update(_principal(), rq)

    def DeleteUser(self, rq: DeleteUserRequest, context: grpc.ServicerContext) -> DeleteUserResponse:
        return self._services.user.delete(_principal(), rq)

    def GetUser(self, rq: GetUserRequest, context: grpc.ServicerContext) -> GetUserResponse:
        return self._services.user.get(_principal(), rq)

    def ListUser(self, rq: ListUserRequest, context: grpc.ServicerContext) -> ListUserResponse:
        # Runs when the RPC terminates, including client cancellation.
        cancelled = threading.Event()
        context.add_callback(cancelled.set)
        return self._services.user.list(_principal(), rq, cancelled)

    def CreatePost(self, rq: CreatePostRequest, context: grpc.ServicerContext) -> CreatePostResponse:
        return self._services.post.create(_principal(), rq)

    def UpdatePost(self, rq: UpdatePostRequest, context: grpc.ServicerContext) -> UpdatePostResponse:
        return self._services.post.update(_principal(), rq)

    def DeletePost(self, rq: DeletePostRequest, context: grpc.ServicerContext) -> DeletePostResponse:
        return self._services.post.delete(_principal(), rq)

    def GetPost(self, rq: GetPostRequest, context: grpc.ServicerContext) -> GetPostResponse:
        return self._services.post.get(_principal(), rq)

    def ListPost(self, rq: ListPostRequest, context: grpc.ServicerContext) -> ListPostResponse:
        return self._services.post.list(_principal(), rq)


def bind_method(
    behavior: Callable[[Any, grpc.ServicerContext], BaseModel],
    request_type: type[BaseModel],
    validator: Validator,
) -> Callable[[bytes, grpc.ServicerContext], BaseModel]:
    """Wrap a servicer method: decode the JSON body, validate it, then call it."""

    def handle(raw: bytes, context: grpc.ServicerContext) -> BaseModel:
        try:
            rq = request_type.model_validate_json(raw or b"{}")
        except ValidationError as e:
            raise bind_error(e.errors()) from e
        validator.validate(ctx.current_principal(), rq)
        return behavior(rq, context)

    return handle


def add_miniblog_servicer_to_server(
    servicer: MiniBlogServicer, server: grpc.Server, validator: Validator
) -> None:
    handlers = {
        name: grpc.unary_unary_rpc_method_handler(
            bind_method(getattr(servicer, name), request_type, validator),
            response_serializer=serialize,
        )
        for name, request_type in METHODS.items()
    }
    server.add_generic_rpc_handlers((grpc.method_handlers_generic_handler(SERVICE_NAME, handlers),))
