"""FastAPI application factory. No business logic; only wiring and middleware."""

from fastapi import FastAPI

import miniblog
from miniblog.api.errors import register_exception_handlers
from miniblog.api.middleware import install_middleware
from miniblog.api.v1 import router as v1_router
from miniblog.bootstrap import Container


def create_app(container: Container) -> FastAPI:
    """REST application (http server mode) serving the container's services."""
    app = FastAPI(
        title="MiniBlog API",
        version=miniblog.__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.container = container
    install_middleware(app, use_tls=container.settings.tls.use_tls)
    register_exception_handlers(app)
    app.include_router(v1_router)
    return app
