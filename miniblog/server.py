"""
Run the API server in one of three modes.

grpc          gRPC only.
grpc-gateway  gRPC plus an HTTP/JSON gateway forwarding to it.
http          REST served directly by FastAPI.

SIGINT/SIGTERM stop the servers; in-flight requests get shutdown_timeout
seconds to finish.
"""

import logging
import signal
import threading

import grpc
import uvicorn

from miniblog.api.gateway import Gateway, create_gateway_app
from miniblog.bootstrap import Container
from miniblog.core.config import GRPC_GATEWAY_SERVER_MODE, GRPC_SERVER_MODE, HTTP_SERVER_MODE
from miniblog.main import create_app
from miniblog.rpc.server import new_channel, new_grpc_server

logger = logging.getLogger(__name__)


class UnionServer:
    def __init__(self, container: Container) -> None:
        self._container = container
        self._settings = container.settings
        self._grpc: grpc.Server | None = None
        self._grpc_port = 0
        self._gateway: Gateway | None = None

    def run(self) -> None:
        mode = self._settings.server_mode
        logger.info("Starting server in %s mode", mode)
        try:
            if mode == GRPC_SERVER_MODE:
                self._run_grpc()
            elif mode == GRPC_GATEWAY_SERVER_MODE:
                self._start_grpc()
                self._gateway = Gateway(new_channel(self._settings, self._grpc_port))
                self._serve_http(create_gateway_app(self._gateway, use_tls=self._settings.tls.use_tls))
            elif mode == HTTP_SERVER_MODE:
                self._serve_http(create_app(self._container))
            else:
                raise ValueError(f"unsupported server mode: {mode}")
        finally:
            self.stop()

    def stop(self) -> None:
        if self._gateway is not None:
            self._gateway.close()
            self._gateway = None
        if self._grpc is not None:
            logger.info("Stopping gRPC server (grace=%ss)", self._settings.shutdown_timeout)
            self._grpc.stop(grace=self._settings.shutdown_timeout).wait()
            self._grpc = None

    def _start_grpc(self) -> None:
        self._grpc, self._grpc_port = new_grpc_server(self._container)
        self._grpc.start()
        logger.info("gRPC server listening on %s", self._settings.grpc.addr)

    def _run_grpc(self) -> None:
        self._start_grpc()
        stopped = threading.Event()

        def handle_signal(signum, _frame) -> None:
            logger.info("Received %s, shutting down", signal.Signals(signum).name)
            stopped.set()

        for sig in (signal.SIGINT, signal.SIGTERM):
            signal.signal(sig, handle_signal)
        stopped.wait()

    def _serve_http(self, app) -> None:
        """Blocks until uvicorn exits; uvicorn handles SIGINT/SIGTERM itself."""
        host, _, port = self._settings.http.addr.rpartition(":")
        tls = self._settings.tls
        config = uvicorn.Config(
            app,
            host=host,
            port=int(port),
            ssl_certfile=tls.cert if tls.use_tls else None,
            ssl_keyfile=tls.key if tls.use_tls else None,
            timeout_graceful_shutdown=int(self._settings.shutdown_timeout),
            log_config=None,
        )
        logger.info("HTTP server listening on %s", self._settings.http.addr)
        uvicorn.Server(config).run()
