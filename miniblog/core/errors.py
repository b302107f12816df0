"""
Uniform error value shared by every layer and transport.

An ErrorX carries an HTTP-like status code, a machine-readable reason, a
human-readable message and optional string metadata. It renders to a JSON body
for HTTP and to a google.rpc.Status (with an ErrorInfo detail) for gRPC, and can
be rebuilt from either representation.
"""

from __future__ import annotations

from typing import Any

import grpc
from google.protobuf import any_pb2
from google.rpc import error_details_pb2, status_pb2
from grpc_status import rpc_status

_HTTP_TO_GRPC: dict[int, grpc.StatusCode] = {
    200: grpc.StatusCode.OK,
    400: grpc.StatusCode.INVALID_ARGUMENT,
    401: grpc.StatusCode.UNAUTHENTICATED,
    403: grpc.StatusCode.PERMISSION_DENIED,
    404: grpc.StatusCode.NOT_FOUND,
    409: grpc.StatusCode.ABORTED,
    429: grpc.StatusCode.RESOURCE_EXHAUSTED,
    499: grpc.StatusCode.CANCELLED,
    500: grpc.StatusCode.INTERNAL,
    501: grpc.StatusCode.UNIMPLEMENTED,
    503: grpc.StatusCode.UNAVAILABLE,
    504: grpc.StatusCode.DEADLINE_EXCEEDED,
}

_GRPC_TO_HTTP: dict[grpc.StatusCode, int] = {
    grpc.StatusCode.OK: 200,
    grpc.StatusCode.CANCELLED: 499,
    grpc.StatusCode.UNKNOWN: 500,
    grpc.StatusCode.INVALID_ARGUMENT: 400,
    grpc.StatusCode.DEADLINE_EXCEEDED: 504,
    grpc.StatusCode.NOT_FOUND: 404,
    grpc.StatusCode.ALREADY_EXISTS: 409,
    grpc.StatusCode.PERMISSION_DENIED: 403,
    grpc.StatusCode.UNAUTHENTICATED: 401,
    grpc.StatusCode.RESOURCE_EXHAUSTED: 429,
    grpc.StatusCode.FAILED_PRECONDITION: 400,
    grpc.StatusCode.ABORTED: 409,
    grpc.StatusCode.OUT_OF_RANGE: 400,
    grpc.StatusCode.UNIMPLEMENTED: 501,
    grpc.StatusCode.INTERNAL: 500,
    grpc.StatusCode.UNAVAILABLE: 503,
    grpc.StatusCode.DATA_LOSS: 500,
}

REQUEST_ID_KEY = "X-Request-ID"


def grpc_code_from_http(code: int) -> grpc.StatusCode:
    return _HTTP_TO_GRPC.get(code, grpc.StatusCode.UNKNOWN)


def http_code_from_grpc(code: grpc.StatusCode) -> int:
    return _GRPC_TO_HTTP.get(code, 500)


class ErrorX(Exception):
    """
    Base error. Subclasses fix code, reason and a default message; instances may
    override the message and attach metadata.
    """

    code: int = 500
    reason: str = "InternalError"
    message: str = "Internal server error."

    def __init__(
        self,
        message: str | None = None,
        *,
        code: int | None = None,
        reason: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> None:
        if code is not None:
            self.code = code
        if reason is not None:
            self.reason = reason
        if message is not None:
            self.message = message
        self.metadata: dict[str, str] = dict(metadata or {})
        super().__init__(self.message)

    def __str__(self) -> str:
        return (
            f"error: code = {self.code} reason = {self.reason} "
            f"message = {self.message} metadata = {self.metadata}"
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code}, reason={self.reason!r}, message={self.message!r})"

    def with_message(self, fmt: str, *args: Any) -> ErrorX:
        """Return a new error of the same type with a formatted message."""
        message = fmt % args if args else fmt
        return type(self)(message, code=self.code, reason=self.reason, metadata=self.metadata)

    def with_metadata(self, metadata: dict[str, str]) -> ErrorX:
        """Return a new error of the same type carrying the given metadata."""
        return type(self)(self.message, code=self.code, reason=self.reason, metadata=metadata)

    def kv(self, *kvs: str) -> ErrorX:
        """Attach key/value pairs to metadata in place; a trailing odd key is ignored."""
        for i in range(0, len(kvs) - 1, 2):
            self.metadata[kvs[i]] = kvs[i + 1]
        return self

    def with_request_id(self, request_id: str) -> ErrorX:
        if not request_id:
            return self
        return self.kv(REQUEST_ID_KEY, request_id)

    def matches(self, other: BaseException) -> bool:
        """True when other is an ErrorX with the same code and reason."""
        return isinstance(other, ErrorX) and other.code == self.code and other.reason == self.reason

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"reason": self.reason, "message": self.message}
        if self.metadata:
            body["metadata"] = dict(self.metadata)
        return body

    def grpc_code(self) -> grpc.StatusCode:
        return grpc_code_from_http(self.code)

    def grpc_status(self) -> grpc.Status:
        """Build a gRPC status whose details carry an ErrorInfo(reason, metadata)."""
        detail = any_pb2.Any()
        detail.Pack(error_details_pb2.ErrorInfo(reason=self.reason, metadata=self.metadata))
        return rpc_status.to_status(
            status_pb2.Status(
                code=self.grpc_code().value[0],
                message=self.message,
                details=[detail],
            )
        )

    @classmethod
    def from_error(cls, err: BaseException | None) -> ErrorX | None:
        """Convert any exception into an ErrorX; gRPC errors keep their reason and metadata."""
        if err is None:
            return None
        if isinstance(err, ErrorX):
            return err
        if isinstance(err, grpc.RpcError) and hasattr(err, "code"):
            return _from_rpc_error(err)
        return InternalError(str(err) or InternalError.message)


def _from_rpc_error(err: grpc.RpcError) -> ErrorX:
    code = err.code()
    message = err.details() or ""
    ret = ErrorX(message, code=http_code_from_grpc(code), reason=InternalError.reason)
    status = rpc_status.from_call(err)
    if status is None:
        return ret
    for detail in status.details:
        if detail.Is(error_details_pb2.ErrorInfo.DESCRIPTOR):
            info = error_details_pb2.ErrorInfo()
            detail.Unpack(info)
            ret.reason = info.reason
            ret.metadata = dict(info.metadata)
            break
    return ret


def code_of(err: BaseException | None) -> int:
    """HTTP status code of an error; 200 for None."""
    if err is None:
        return 200
    return ErrorX.from_error(err).code


def reason_of(err: BaseException | None) -> str:
    if err is None:
        return ""
    return ErrorX.from_error(err).reason


class InternalError(ErrorX):
    code = 500
    reason = "InternalError"
    message = "Internal server error."


class NotFoundError(ErrorX):
    code = 404
    reason = "NotFound"
    message = "Resource not found."


class BindError(ErrorX):
    code = 400
    reason = "BindError"
    message = "Error occurred while binding the request body to the struct."


class InvalidArgumentError(ErrorX):
    code = 400
    reason = "InvalidArgument"
    message = "Argument verification failed."


class UnauthenticatedError(ErrorX):
    code = 401
    reason = "Unauthenticated"
    message = "Unauthenticated."


class PermissionDeniedError(ErrorX):
    code = 403
    reason = "PermissionDenied"
    message = "Permission denied. Access to the requested resource is forbidden."


class OperationFailedError(ErrorX):
    code = 409
    reason = "OperationFailed"
    message = "The requested operation has failed. Please try again later."


def bind_error(errors: list[dict[str, Any]] | tuple[dict[str, Any], ...]) -> BindError:
    """BindError describing pydantic validation errors (first few locations and messages)."""
    parts = []
    for err in list(errors)[:3]:
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        msg = err.get("msg", "invalid value")
        parts.append(f"{loc}: {msg}" if loc else msg)
    if not parts:
        return BindError()
    return BindError(f"{BindError.message} {'; '.join(parts)}")
