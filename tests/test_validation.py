"""Unit tests for request validation rules and dispatch."""

import unittest

from pydantic import BaseModel

from miniblog.core.context import Principal
from miniblog.core.errno import UsernameInvalidError
from miniblog.core.errors import InvalidArgumentError, PermissionDeniedError
from miniblog.schemas.auth import ChangePasswordRequest
from miniblog.schemas.post import CreatePostRequest, DeletePostRequest, ListPostRequest, UpdatePostRequest
from miniblog.schemas.user import (
    CreateUserRequest,
    GetUserRequest,
    ListUserRequest,
    UpdateUserRequest,
)
from miniblog.validation import Validator, validate_all_fields, validate_selected_fields

ME = Principal(user_id="user-aaaaaa", username="alice")


def _create_user(**overrides) -> CreateUserRequest:
    values = {
        "username": "alice_01",
        "password": "miniblog1234",
        "nickname": "alice",
        "email": "alice@example.com",
        "phone": "13800000001",
    }
    values.update(overrides)
    return CreateUserRequest(**values)


class TestFieldHelpers(unittest.TestCase):
    """validate_all_fields / validate_selected_fields semantics."""

    class _Req(BaseModel):
        a: str | None = None
        b: str = ""
        c: str = ""

    def _rules(self, seen: list[str]):
        return {
            "a": lambda v: seen.append("a"),
            "b": lambda v: seen.append("b"),
            "missing": lambda v: seen.append("missing"),
        }

    def test_all_fields_skips_none_and_fields_without_rules(self) -> None:
        seen: list[str] = []
        validate_all_fields(self._Req(), self._rules(seen))
        self.assertEqual(seen, ["b"])

    def test_selected_fields_only_checks_named(self) -> None:
        seen: list[str] = []
        validate_selected_fields(self._Req(a="x"), self._rules(seen), "a", "missing", "c")
        self.assertEqual(seen, ["a"])


class TestUserValidation(unittest.TestCase):
    def setUp(self) -> None:
        self.validator = Validator()

    def test_valid_create_passes(self) -> None:
        self.validator.validate(None, _create_user())

    def test_username_rules(self) -> None:
        for bad in ("ab", "a" * 21, "bad name", "bad-name", ""):
            with self.subTest(username=bad), self.assertRaises(UsernameInvalidError):
                self.validator.validate(None, _create_user(username=bad))

    def test_password_rules(self) -> None:
        for bad, fragment in (
            ("", "cannot be empty"),
            ("ab1", "at least 6"),
            ("12345678", "letter"),
            ("abcdefgh", "number"),
        ):
            with self.subTest(password=bad):
                with self.assertRaises(InvalidArgumentError) as cm:
                    self.validator.validate(None, _create_user(password=bad))
                self.assertIn(fragment, cm.exception.message)

    def test_contact_rules(self) -> None:
        for field, bad in (("email", "not-an-email"), ("phone", "12345"), ("nickname", "n" * 30)):
            with self.subTest(field=field), self.assertRaises(InvalidArgumentError):
                self.validator.validate(None, _create_user(**{field: bad}))

    def test_nickname_is_optional(self) -> None:
        self.validator.validate(None, _create_user(nickname=None))

    def test_path_user_must_be_caller(self) -> None:
        for rq in (
            GetUserRequest(user_id="user-bbbbbb"),
            UpdateUserRequest(user_id="user-bbbbbb"),
            ChangePasswordRequest(user_id="user-bbbbbb", old_password="abc123", new_password="abc456"),
        ):
            with self.subTest(rq=type(rq).__name__), self.assertRaises(PermissionDeniedError):
                self.validator.validate(ME, rq)

    def test_update_checks_only_supplied_fields(self) -> None:
        self.validator.validate(ME, UpdateUserRequest(user_id=ME.user_id, nickname="new name"))
        with self.assertRaises(InvalidArgumentError):
            self.validator.validate(ME, UpdateUserRequest(user_id=ME.user_id, phone="bad"))

    def test_update_cannot_take_reserved_admin_name(self) -> None:
        for name in ("root", "Root"):
            with self.subTest(name=name), self.assertRaises(UsernameInvalidError):
                self.validator.validate(ME, UpdateUserRequest(user_id=ME.user_id, username=name))
        root = Principal(user_id="user-rootxx", username="root")
        self.validator.validate(root, UpdateUserRequest(user_id=root.user_id, username="root"))

    def test_list_limit_must_be_positive(self) -> None:
        self.validator.validate(ME, ListUserRequest(offset=0, limit=10))
        with self.assertRaises(InvalidArgumentError):
            self.validator.validate(ME, ListUserRequest(offset=0, limit=0))


class TestPostValidation(unittest.TestCase):
    def setUp(self) -> None:
        self.validator = Validator()

    def test_create_requires_title_and_content(self) -> None:
        self.validator.validate(ME, CreatePostRequest(title="t", content="c"))
        with self.assertRaises(InvalidArgumentError):
            self.validator.validate(ME, CreatePostRequest(title="", content="c"))
        with self.assertRaises(InvalidArgumentError):
            self.validator.validate(ME, CreatePostRequest(title="t", content=""))

    def test_update_skips_omitted_fields(self) -> None:
        self.validator.validate(ME, UpdatePostRequest(post_id="post-aaaaaa", title="t"))
        with self.assertRaises(InvalidArgumentError):
            self.validator.validate(ME, UpdatePostRequest(post_id="", title="t"))

    def test_delete_requires_ids(self) -> None:
        with self.assertRaises(InvalidArgumentError):
            self.validator.validate(ME, DeletePostRequest(post_ids=[]))

    def test_list_title_filter_length(self) -> None:
        self.validator.validate(ME, ListPostRequest(limit=5, title="hello"))
        with self.assertRaises(InvalidArgumentError):
            self.validator.validate(ME, ListPostRequest(limit=5, title="x" * 101))


class TestDispatch(unittest.TestCase):
    def test_unknown_request_type_passes(self) -> None:
        class Unvalidated(BaseModel):
            value: str = ""

        Validator().validate(None, Unvalidated())


if __name__ == "__main__":
    unittest.main()
