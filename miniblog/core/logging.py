"""Logging setup: stdlib logging with request context on every record."""

import logging

from miniblog.core import context


class RequestContextFilter(logging.Filter):
    """Attach request_id and user_id from the request context to each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = context.request_id() or "-"
        record.user_id = context.user_id() or "-"
        return True


def configure_logging(level: str = "INFO", fmt: str | None = None) -> None:
    """Configure the root logger once for the process (CLI entry points)."""
    logging.basicConfig(
        level=level,
        format=fmt or "%(asctime)s %(levelname)s %(name)s request_id=%(request_id)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )
    context_filter = RequestContextFilter()
    for handler in logging.getLogger().handlers:
        handler.addFilter(context_filter)
    # grpc and casbin are chatty at INFO.
    logging.getLogger("grpc").setLevel(logging.WARNING)
    logging.getLogger("casbin").setLevel(logging.WARNING)
