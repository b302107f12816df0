"""End-to-end tests of the gRPC service and the HTTP gateway in front of it."""

import os
import unittest

import grpc
from fastapi.testclient import TestClient

from miniblog.api.gateway import Gateway, create_gateway_app
from miniblog.bootstrap import build_container
from miniblog.core.errors import ErrorX
from miniblog.rpc.codec import dumps, full_method, loads
from miniblog.rpc.server import new_channel, new_grpc_server
from tests.support import DEFAULT_PASSWORD, ContainerTestCase, make_settings


class GRPCTestCase(ContainerTestCase):
    """Starts the real server on an ephemeral port for each test."""

    def setUp(self) -> None:
        super().setUp()
        # Rebuild with an ephemeral gRPC port.
        self.container.close()
        self.settings = make_settings(
            os.path.join(self._tmp.name, "miniblog.db"),
            grpc={"addr": "127.0.0.1:0"},
        )
        self.container = build_container(self.settings, auto_load_policy=False)
        self.addCleanup(self.container.close)

        self.server, self.port = new_grpc_server(self.container)
        self.server.start()
        self.addCleanup(self.server.stop, None)
        self.channel = new_channel(self.settings, self.port)
        self.addCleanup(self.channel.close)

    def call(self, method: str, payload: dict | None = None, token: str | None = None, **kwargs):
        metadata = list(kwargs.pop("metadata", ()))
        if token:
            metadata.append(("authorization", f"Bearer {token}"))
        stub = self.channel.unary_unary(full_method(method), request_serializer=dumps, response_deserializer=loads)
        return stub.with_call(payload or {}, metadata=metadata, timeout=10)

    def call_raw(self, method: str, data: bytes):
        stub = self.channel.unary_unary(full_method(method), response_deserializer=loads)
        return stub(data, timeout=10)

    def signup(self, username: str, phone: str) -> str:
        rsp, _ = self.call(
            "CreateUser",
            {"username": username, "password": DEFAULT_PASSWORD, "email": f"{username}@example.com", "phone": phone},
        )
        return rsp["user_id"]

    def login(self, username: str) -> str:
        rsp, _ = self.call("Login", {"username": username, "password": DEFAULT_PASSWORD})
        return rsp["token"]


class TestGRPC(GRPCTestCase):
    def test_healthz(self) -> None:
        rsp, _ = self.call("Healthz")
        self.assertEqual(rsp["status"], "Healthy")

    def test_request_id_in_initial_metadata(self) -> None:
        _, call = self.call("Healthz", metadata=[("x-request-id", "req-42")])
        self.assertIn(("x-request-id", "req-42"), tuple(call.initial_metadata()))

    def test_create_login_get(self) -> None:
        user_id = self.signup("alice", "13800000001")
        token = self.login("alice")
        rsp, _ = self.call("GetUser", {"user_id": user_id}, token)
        self.assertEqual(rsp["user"]["username"], "alice")

    def test_posts(self) -> None:
        self.signup("alice", "13800000001")
        token = self.login("alice")
        post_id = self.call("CreatePost", {"title": "hello", "content": "world"}, token)[0]["post_id"]
        rsp, _ = self.call("ListPost", {"offset": 0, "limit": 10}, token)
        self.assertEqual(rsp["total_count"], 1)
        self.assertEqual(rsp["posts"][0]["post_id"], post_id)
        self.call("DeletePost", {"post_ids": [post_id]}, token)
        with self.assertRaises(grpc.RpcError) as cm:
            self.call("GetPost", {"post_id": post_id}, token)
        self.assertEqual(cm.exception.code(), grpc.StatusCode.NOT_FOUND)
        self.assertEqual(ErrorX.from_error(cm.exception).reason, "NotFound.PostNotFound")

    def test_missing_token(self) -> None:
        with self.assertRaises(grpc.RpcError) as cm:
            self.call("GetUser", {"user_id": "user-aaaaaa"})
        self.assertEqual(cm.exception.code(), grpc.StatusCode.UNAUTHENTICATED)
        err = ErrorX.from_error(cm.exception)
        self.assertEqual(err.reason, "Unauthenticated.TokenInvalid")
        self.assertTrue(err.metadata.get("X-Request-ID"))

    def test_malformed_request_is_bind_error(self) -> None:
        with self.assertRaises(grpc.RpcError) as cm:
            self.call_raw("Login", b"{not json")
        self.assertEqual(cm.exception.code(), grpc.StatusCode.INVALID_ARGUMENT)
        self.assertEqual(ErrorX.from_error(cm.exception).reason, "BindError")

    def test_validation_error(self) -> None:
        with self.assertRaises(grpc.RpcError) as cm:
            self.call("CreateUser", {"username": "a!", "password": DEFAULT_PASSWORD})
        self.assertEqual(cm.exception.code(), grpc.StatusCode.INVALID_ARGUMENT)

    def test_normal_user_cannot_delete_users(self) -> None:
        self.signup("alice", "13800000001")
        bob_id = self.signup("bob", "13800000002")
        with self.assertRaises(grpc.RpcError) as cm:
            self.call("DeleteUser", {"user_id": bob_id}, self.login("alice"))
        self.assertEqual(cm.exception.code(), grpc.StatusCode.PERMISSION_DENIED)

    def test_admin_lists_everyone(self) -> None:
        self.container.authz.make_admin(self.signup("root", "13800000009"))
        self.signup("alice", "13800000001")
        rsp, _ = self.call("ListUser", {"offset": 0, "limit": 10}, self.login("root"))
        self.assertEqual(rsp["total_count"], 2)


class TestGateway(GRPCTestCase):
    def setUp(self) -> None:
        super().setUp()
        gateway = Gateway(new_channel(self.settings, self.port), timeout=10)
        self.addCleanup(gateway.close)
        self.client = TestClient(create_gateway_app(gateway))

    def test_rest_flow_through_grpc(self) -> None:
        rsp = self.client.post(
            "/v1/users",
            json={"username": "alice", "password": DEFAULT_PASSWORD, "email": "a@example.com", "phone": "13800000001"},
        )
        self.assertEqual(rsp.status_code, 200, rsp.text)
        user_id = rsp.json()["user_id"]

        token = self.client.post("/login", json={"username": "alice", "password": DEFAULT_PASSWORD}).json()["token"]
        headers = {"Authorization": f"Bearer {token}"}
        rsp = self.client.get(f"/v1/users/{user_id}", headers=headers)
        self.assertEqual(rsp.status_code, 200, rsp.text)
        self.assertEqual(rsp.json()["user"]["user_id"], user_id)

        rsp = self.client.post("/v1/posts", headers=headers, json={"title": "t", "content": "c"})
        post_id = rsp.json()["post_id"]
        rsp = self.client.get("/v1/posts", headers=headers, params={"offset": 0, "limit": 5})
        self.assertEqual(rsp.json()["total_count"], 1)
        rsp = self.client.delete("/v1/posts", headers=headers, params={"post_ids": [post_id]})
        self.assertEqual(rsp.status_code, 200, rsp.text)

    def test_errors_keep_status_and_reason(self) -> None:
        rsp = self.client.get("/v1/users/user-aaaaaa", headers={"X-Request-ID": "gw-1"})
        self.assertEqual(rsp.status_code, 401)
        body = rsp.json()
        self.assertEqual(body["reason"], "Unauthenticated.TokenInvalid")
        self.assertEqual(body["metadata"]["X-Request-ID"], "gw-1")

    def test_invalid_json_body(self) -> None:
        rsp = self.client.post("/login", content=b"{oops", headers={"Content-Type": "application/json"})
        self.assertEqual(rsp.status_code, 400)
        self.assertEqual(rsp.json()["reason"], "BindError")


if __name__ == "__main__":
    unittest.main()
