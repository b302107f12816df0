"""HTTP middleware: request id propagation, cache and security headers, CORS."""

import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from miniblog.core import context
from miniblog.core.known import X_REQUEST_ID

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, max-age=0, must-revalidate",
    "Expires": "Thu, 01 Jan 1970 00:00:00 GMT",
}

SECURE_HEADERS = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "X-XSS-Protection": "1; mode=block",
}


def install_middleware(app: FastAPI, *, use_tls: bool = False) -> None:
    """Add the middleware shared by the REST and gateway apps."""

    @app.middleware("http")
    async def request_id(request: Request, call_next):
        value = request.headers.get(X_REQUEST_ID) or str(uuid.uuid4())
        context.set_request_id(value)
        response = await call_next(request)
        response.headers[X_REQUEST_ID] = value
        return response

    @app.middleware("http")
    async def headers(request: Request, call_next):
        response = await call_next(request)
        response.headers.update(NO_CACHE_HEADERS)
        response.headers.update(SECURE_HEADERS)
        if use_tls:
            response.headers["Strict-Transport-Security"] = "max-age=31536000"
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["authorization", "origin", "content-type", "accept", X_REQUEST_ID],
    )
