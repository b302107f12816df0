"""REST (http server mode) tests through FastAPI's TestClient."""

import unittest

from fastapi.testclient import TestClient

from miniblog.main import create_app
from tests.support import DEFAULT_PASSWORD, ContainerTestCase


class APITestCase(ContainerTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.client = TestClient(create_app(self.container))

    def signup(self, username: str, phone: str) -> str:
        rsp = self.client.post(
            "/v1/users",
            json={
                "username": username,
                "password": DEFAULT_PASSWORD,
                "email": f"{username}@example.com",
                "phone": phone,
            },
        )
        self.assertEqual(rsp.status_code, 200, rsp.text)
        return rsp.json()["user_id"]

    def signup_admin(self, username: str, phone: str) -> str:
        """Sign up, then grant the administrator role the way the operator script does."""
        user_id = self.signup(username, phone)
        self.container.authz.make_admin(user_id)
        return user_id

    def login(self, username: str) -> dict[str, str]:
        rsp = self.client.post("/login", json={"username": username, "password": DEFAULT_PASSWORD})
        self.assertEqual(rsp.status_code, 200, rsp.text)
        return {"Authorization": f"Bearer {rsp.json()['token']}"}


class TestHealthAndAuth(APITestCase):
    def test_healthz(self) -> None:
        rsp = self.client.get("/healthz")
        self.assertEqual(rsp.status_code, 200)
        self.assertEqual(rsp.json()["status"], "Healthy")
        self.assertEqual(rsp.json()["database"], "connected")

    def test_request_id_is_echoed(self) -> None:
        rsp = self.client.get("/healthz", headers={"X-Request-ID": "req-123"})
        self.assertEqual(rsp.headers["X-Request-ID"], "req-123")

    def test_request_id_is_generated(self) -> None:
        rsp = self.client.get("/healthz")
        self.assertTrue(rsp.headers.get("X-Request-ID"))

    def test_signup_login_and_get_self(self) -> None:
        user_id = self.signup("alice", "13800000001")
        headers = self.login("alice")
        rsp = self.client.get(f"/v1/users/{user_id}", headers=headers)
        self.assertEqual(rsp.status_code, 200, rsp.text)
        user = rsp.json()["user"]
        self.assertEqual((user["user_id"], user["username"]), (user_id, "alice"))
        self.assertNotIn("password", user)

    def test_missing_token(self) -> None:
        rsp = self.client.get("/v1/users/user-aaaaaa")
        self.assertEqual(rsp.status_code, 401)
        self.assertEqual(rsp.json()["reason"], "Unauthenticated.TokenInvalid")

    def test_token_of_deleted_user_is_rejected(self) -> None:
        self.signup_admin("root", "13800000009")
        alice_id = self.signup("alice", "13800000001")
        alice = self.login("alice")
        rsp = self.client.delete(f"/v1/users/{alice_id}", headers=self.login("root"))
        self.assertEqual(rsp.status_code, 200, rsp.text)
        rsp = self.client.get(f"/v1/users/{alice_id}", headers=alice)
        self.assertEqual(rsp.status_code, 401)

    def test_wrong_password(self) -> None:
        self.signup("alice", "13800000001")
        rsp = self.client.post("/login", json={"username": "alice", "password": "wrong1234"})
        self.assertEqual(rsp.status_code, 401)
        self.assertEqual(rsp.json()["reason"], "Unauthenticated.PasswordInvalid")

    def test_refresh_token(self) -> None:
        user_id = self.signup("alice", "13800000001")
        rsp = self.client.put("/refresh-token", headers=self.login("alice"))
        self.assertEqual(rsp.status_code, 200, rsp.text)
        self.assertEqual(self.container.tokens.parse(rsp.json()["token"]), user_id)

    def test_change_password(self) -> None:
        user_id = self.signup("alice", "13800000001")
        rsp = self.client.put(
            f"/v1/users/{user_id}/change-password",
            headers=self.login("alice"),
            json={"old_password": DEFAULT_PASSWORD, "new_password": "newpass99"},
        )
        self.assertEqual(rsp.status_code, 200, rsp.text)
        rsp = self.client.post("/login", json={"username": "alice", "password": "newpass99"})
        self.assertEqual(rsp.status_code, 200)


class TestUsers(APITestCase):
    def setUp(self) -> None:
        super().setUp()
        self.alice_id = self.signup("alice", "13800000001")
        self.bob_id = self.signup("bob", "13800000002")
        self.alice = self.login("alice")

    def test_invalid_body_is_bind_error(self) -> None:
        rsp = self.client.post("/v1/users", json={"username": ["not", "a", "string"]})
        self.assertEqual(rsp.status_code, 400)
        self.assertEqual(rsp.json()["reason"], "BindError")

    def test_invalid_username_is_rejected(self) -> None:
        rsp = self.client.post(
            "/v1/users",
            json={"username": "a!", "password": DEFAULT_PASSWORD, "email": "a@example.com", "phone": "13800000003"},
        )
        self.assertEqual(rsp.status_code, 400)
        self.assertEqual(rsp.json()["reason"], "InvalidArgument.UsernameInvalid")

    def test_duplicate_username(self) -> None:
        rsp = self.client.post(
            "/v1/users",
            json={"username": "alice", "password": DEFAULT_PASSWORD, "email": "x@example.com", "phone": "13800000004"},
        )
        self.assertEqual(rsp.status_code, 400)
        self.assertEqual(rsp.json()["reason"], "AlreadyExist.UserAlreadyExists")

    def test_cannot_read_other_user(self) -> None:
        rsp = self.client.get(f"/v1/users/{self.bob_id}", headers=self.alice)
        self.assertEqual(rsp.status_code, 403)
        self.assertEqual(rsp.json()["reason"], "PermissionDenied")

    def test_update_self(self) -> None:
        rsp = self.client.put(f"/v1/users/{self.alice_id}", headers=self.alice, json={"nickname": "Alice"})
        self.assertEqual(rsp.status_code, 200, rsp.text)
        user = self.client.get(f"/v1/users/{self.alice_id}", headers=self.alice).json()["user"]
        self.assertEqual(user["nickname"], "Alice")

    def test_normal_user_cannot_delete(self) -> None:
        rsp = self.client.delete(f"/v1/users/{self.bob_id}", headers=self.alice)
        self.assertEqual(rsp.status_code, 403)

    def test_admin_can_delete(self) -> None:
        self.signup_admin("root", "13800000009")
        rsp = self.client.delete(f"/v1/users/{self.bob_id}", headers=self.login("root"))
        self.assertEqual(rsp.status_code, 200, rsp.text)

    def test_list_as_normal_user(self) -> None:
        rsp = self.client.get("/v1/users", headers=self.alice, params={"offset": 0, "limit": 10})
        self.assertEqual(rsp.status_code, 200, rsp.text)
        body = rsp.json()
        self.assertEqual(body["total_count"], 1)
        self.assertEqual(body["users"][0]["user_id"], self.alice_id)

    def test_list_as_admin(self) -> None:
        self.signup_admin("root", "13800000009")
        rsp = self.client.get("/v1/users", headers=self.login("root"), params={"offset": 0, "limit": 10})
        self.assertEqual(rsp.status_code, 200, rsp.text)
        self.assertEqual(rsp.json()["total_count"], 3)

    def test_admin_role_not_username_lifts_scoping(self) -> None:
        self.signup_admin("operator", "13800000008")
        rsp = self.client.get("/v1/users", headers=self.login("operator"), params={"offset": 0, "limit": 10})
        self.assertEqual(rsp.status_code, 200, rsp.text)
        self.assertEqual(rsp.json()["total_count"], 3)

    def test_signup_as_root_grants_no_admin_rights(self) -> None:
        self.signup("root", "13800000009")
        root = self.login("root")
        rsp = self.client.delete(f"/v1/users/{self.bob_id}", headers=root)
        self.assertEqual(rsp.status_code, 403)
        self.assertEqual(rsp.json()["reason"], "PermissionDenied")
        rsp = self.client.get("/v1/users", headers=root, params={"offset": 0, "limit": 10})
        self.assertEqual(rsp.json()["total_count"], 1)
        self.assertEqual(self.client.get(f"/v1/users/{self.bob_id}", headers=self.login("bob")).status_code, 200)

    def test_cannot_rename_to_root(self) -> None:
        rsp = self.client.put(f"/v1/users/{self.alice_id}", headers=self.alice, json={"username": "root"})
        self.assertEqual(rsp.status_code, 400)
        self.assertEqual(rsp.json()["reason"], "InvalidArgument.UsernameInvalid")
        rsp = self.client.get("/v1/users", headers=self.alice, params={"offset": 0, "limit": 10})
        self.assertEqual([u["username"] for u in rsp.json()["users"]], ["alice"])


class TestPosts(APITestCase):
    def setUp(self) -> None:
        super().setUp()
        self.signup("alice", "13800000001")
        self.signup("bob", "13800000002")
        self.alice = self.login("alice")
        self.bob = self.login("bob")

    def _create(self, headers: dict[str, str], title: str = "hello") -> str:
        rsp = self.client.post("/v1/posts", headers=headers, json={"title": title, "content": "body"})
        self.assertEqual(rsp.status_code, 200, rsp.text)
        return rsp.json()["post_id"]

    def test_crud(self) -> None:
        post_id = self._create(self.alice)
        self.assertTrue(post_id.startswith("post-"))
        rsp = self.client.put(f"/v1/posts/{post_id}", headers=self.alice, json={"title": "edited"})
        self.assertEqual(rsp.status_code, 200, rsp.text)
        post = self.client.get(f"/v1/posts/{post_id}", headers=self.alice).json()["post"]
        self.assertEqual((post["title"], post["content"]), ("edited", "body"))

        rsp = self.client.request("DELETE", "/v1/posts", headers=self.alice, json={"post_ids": [post_id]})
        self.assertEqual(rsp.status_code, 200, rsp.text)
        rsp = self.client.get(f"/v1/posts/{post_id}", headers=self.alice)
        self.assertEqual(rsp.status_code, 404)
        self.assertEqual(rsp.json()["reason"], "NotFound.PostNotFound")

    def test_other_users_post_is_not_found(self) -> None:
        post_id = self._create(self.alice)
        rsp = self.client.get(f"/v1/posts/{post_id}", headers=self.bob)
        self.assertEqual(rsp.status_code, 404)

    def test_list_with_title_filter(self) -> None:
        self._create(self.alice, "python tips")
        self._create(self.alice, "go tips")
        self._create(self.bob, "python news")
        rsp = self.client.get("/v1/posts", headers=self.alice, params={"offset": 0, "limit": 10, "title": "python"})
        self.assertEqual(rsp.status_code, 200, rsp.text)
        body = rsp.json()
        self.assertEqual(body["total_count"], 1)
        self.assertEqual(body["posts"][0]["title"], "python tips")

    def test_post_count_in_user_listing(self) -> None:
        self._create(self.alice)
        self._create(self.alice)
        rsp = self.client.get("/v1/users", headers=self.alice, params={"offset": 0, "limit": 10})
        self.assertEqual(rsp.json()["users"][0]["post_count"], 2)


if __name__ == "__main__":
    unittest.main()
