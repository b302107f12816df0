"""
JSON wire codec for the MiniBlog gRPC service.

Messages are the pydantic schemas in miniblog.schemas, carried as UTF-8 JSON
instead of protobuf. Errors still travel as google.rpc.Status with ErrorInfo.
"""

import json
from typing import Any

from pydantic import BaseModel

SERVICE_NAME = "miniblog.v1.MiniBlog"


def full_method(name: str) -> str:
    """'/miniblog.v1.MiniBlog/<name>', the form interceptors and casbin objects use."""
    return f"/{SERVICE_NAME}/{name}"


def method_name(full: str) -> str:
    return full.rsplit("/", 1)[-1]


def serialize(message: BaseModel) -> bytes:
    return message.model_dump_json().encode("utf-8")


def dumps(payload: dict[str, Any]) -> bytes:
    """Client-side request serializer."""
    return json.dumps(payload).encode("utf-8")


def loads(data: bytes) -> dict[str, Any]:
    """Client-side response deserializer."""
    return json.loads(data or b"{}")
