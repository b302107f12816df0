"""Render errors as {"reason", "message", "metadata"} JSON with the error's HTTP status."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from miniblog.core import context
from miniblog.core.errors import ErrorX, InternalError, bind_error
from miniblog.core.known import X_REQUEST_ID

logger = logging.getLogger(__name__)


def error_response(err: ErrorX) -> JSONResponse:
    request_id = context.request_id()
    err.with_request_id(request_id)
    headers = {X_REQUEST_ID: request_id} if request_id else None
    return JSONResponse(status_code=err.code, content=err.to_dict(), headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ErrorX)
    def handle_errorx(request: Request, exc: ErrorX) -> JSONResponse:
        if exc.code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    def handle_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        return error_response(bind_error(exc.errors()))

    @app.exception_handler(Exception)
    def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error in %s %s", request.method, request.url.path)
        return error_response(InternalError())
