"""
mb-apiserver command line entrypoint. Run from project root:

  python -m miniblog --config ~/.miniblog/mb-apiserver.yaml
  mb-apiserver --server-mode http --http-addr 0.0.0.0:5555

Flags override environment variables (MINIBLOG_*), which override the YAML file.
"""

import argparse
import logging
import os
import sys

from dotenv import load_dotenv
from pydantic import ValidationError

import miniblog
from miniblog.bootstrap import build_container
from miniblog.core.config import AVAILABLE_SERVER_MODES, Settings, load_settings
from miniblog.core.logging import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mb-apiserver",
        description="MiniBlog API server: users and posts over gRPC, a JSON gateway or plain HTTP.",
    )
    parser.add_argument("-c", "--config", help="Path to the YAML configuration file")
    parser.add_argument(
        "--server-mode",
        choices=[*AVAILABLE_SERVER_MODES, "gin"],
        help="Server mode (gin is an alias of http)",
    )
    parser.add_argument("--jwt-key", help="JWT signing key (at least 6 characters)")
    parser.add_argument("--expiration", help="Token lifetime, e.g. 7200 or PT2H")
    parser.add_argument("--http-addr", help="HTTP listen address, host:port")
    parser.add_argument("--grpc-addr", help="gRPC listen address, host:port")
    parser.add_argument("--database-url", help="SQLAlchemy URL overriding the MySQL options")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ERROR or CRITICAL")
    parser.add_argument("--version", action="version", version=f"%(prog)s {miniblog.__version__}")
    return parser


def settings_from_args(args: argparse.Namespace) -> Settings:
    """Settings with the flags that were given applied on top of the other sources."""
    overrides: dict[str, object] = {}
    if args.server_mode:
        overrides["server_mode"] = args.server_mode
    if args.log_level:
        overrides["log_level"] = args.log_level
    if args.database_url:
        overrides["database_url"] = args.database_url
    if args.http_addr:
        overrides["http"] = {"addr": args.http_addr}
    if args.grpc_addr:
        overrides["grpc"] = {"addr": args.grpc_addr}
    jwt: dict[str, object] = {}
    if args.jwt_key:
        jwt["key"] = args.jwt_key
    if args.expiration:
        jwt["expiration"] = args.expiration
    if jwt:
        overrides["jwt"] = jwt
    return load_settings(args.config, **overrides)


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)

    if args.config and not os.path.isfile(args.config):
        print(f"Config file not found: {args.config}", file=sys.stderr)
        return 1
    try:
        settings = settings_from_args(args)
    except ValidationError as e:
        print(f"Invalid configuration:\n{e}", file=sys.stderr)
        return 1

    configure_logging(settings.log_level, settings.log_format)

    # Imported here so --help and config errors do not pay for grpc/uvicorn imports.
    from miniblog.server import UnionServer

    container = build_container(settings)
    try:
        UnionServer(container).run()
        return 0
    except Exception as e:
        logger.exception("Server failed: %s", e)
        return 1
    finally:
        container.close()


if __name__ == "__main__":
    sys.exit(main())
