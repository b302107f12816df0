"""gRPC server construction and client channel helpers."""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import TYPE_CHECKING

import grpc

from miniblog.core.config import Settings
from miniblog.rpc.interceptors import (
    AuthnInterceptor,
    AuthzInterceptor,
    ErrorInterceptor,
    RequestIDInterceptor,
)
from miniblog.rpc.service import MiniBlogServicer, add_miniblog_servicer_to_server

if TYPE_CHECKING:
    from miniblog.bootstrap import Container

logger = logging.getLogger(__name__)


def new_grpc_server(container: "Container") -> tuple[grpc.Server, int]:
    """Build a bound (not yet started) gRPC server; returns it with the bound port."""
    settings = container.settings
    server = grpc.server(
        ThreadPoolExecutor(max_workers=settings.grpc.max_workers, thread_name_prefix="grpc"),
        interceptors=[
            RequestIDInterceptor(),
            ErrorInterceptor(),
            AuthnInterceptor(container.tokens, container.datastore, container.authz),
            AuthzInterceptor(container.authz),
        ],
    )
    add_miniblog_servicer_to_server(
        MiniBlogServicer(container.services, container.datastore),
        server,
        container.validator,
    )

    addr = settings.grpc.addr
    if settings.tls.use_tls:
        creds = grpc.ssl_server_credentials(
            [(Path(settings.tls.key).read_bytes(), Path(settings.tls.cert).read_bytes())]
        )
        port = server.add_secure_port(addr, creds)
    else:
        port = server.add_insecure_port(addr)
    if port == 0:
        raise RuntimeError(f"Failed to bind gRPC on {addr}")
    logger.info("gRPC server bound on %s (port %d, tls=%s)", addr, port, settings.tls.use_tls)
    return server, port


def dial_address(addr: str) -> str:
    """Address a local client should dial for a server listening on addr."""
    host, _, port = addr.rpartition(":")
    if host in ("", "0.0.0.0", "[::]", "::"):
        host = "127.0.0.1"
    return f"{host}:{port}"


def new_channel(settings: Settings, port: int | None = None) -> grpc.Channel:
    """Channel to this process's own gRPC server (used by the gateway); port overrides the configured one."""
    target = dial_address(settings.grpc.addr)
    if port:
        target = f"{target.rpartition(':')[0]}:{port}"
    if settings.tls.use_tls:
        creds = grpc.ssl_channel_credentials(root_certificates=Path(settings.tls.cert).read_bytes())
        return grpc.secure_channel(target, creds)
    return grpc.insecure_channel(target)
