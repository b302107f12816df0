"""Validation of user and authentication requests."""

import re

from miniblog.core.context import Principal
from miniblog.core.errno import UsernameInvalidError
from miniblog.core.known import ADMIN_USERNAME
from miniblog.schemas.auth import ChangePasswordRequest, LoginRequest
from miniblog.schemas.user import (
    CreateUserRequest,
    DeleteUserRequest,
    GetUserRequest,
    ListUserRequest,
    UpdateUserRequest,
)
from miniblog.validation.rules import (
    Rules,
    check_email,
    check_limit,
    check_password,
    check_phone,
    invalid,
    not_empty,
    require_self,
    validate_all_fields,
    validate_selected_fields,
)

_USERNAME_RE = re.compile(r"^[A-Za-z0-9_]{3,20}$")

NICKNAME_MAX_LEN = 30


def check_username(value: str) -> None:
    if not _USERNAME_RE.match(value):
        raise UsernameInvalidError()


def check_nickname(value: str) -> None:
    if len(value) >= NICKNAME_MAX_LEN:
        raise invalid(f"nickname must be less than {NICKNAME_MAX_LEN} characters")


USER_RULES: Rules = {
    "password": check_password,
    "old_password": check_password,
    "new_password": check_password,
    "user_id": not_empty("userID"),
    "username": check_username,
    "nickname": check_nickname,
    "email": check_email,
    "phone": check_phone,
    "limit": check_limit,
}


class UserValidation:
    def validate_login_request(self, principal: Principal | None, rq: LoginRequest) -> None:
        validate_all_fields(rq, USER_RULES)

    def validate_change_password_request(
        self, principal: Principal | None, rq: ChangePasswordRequest
    ) -> None:
        require_self(principal, rq.user_id)
        validate_all_fields(rq, USER_RULES)

    def validate_create_user_request(self, principal: Principal | None, rq: CreateUserRequest) -> None:
        validate_all_fields(rq, USER_RULES)

    def validate_update_user_request(self, principal: Principal | None, rq: UpdateUserRequest) -> None:
        require_self(principal, rq.user_id)
        validate_selected_fields(rq, USER_RULES, "user_id", "username", "nickname", "email", "phone")
        # root may keep its name; nobody else may take it.
        if (
            rq.username is not None
            and rq.username.lower() == ADMIN_USERNAME
            and (principal is None or principal.username != rq.username)
        ):
            raise UsernameInvalidError().with_message("username `%s` is reserved", ADMIN_USERNAME)

    def validate_delete_user_request(self, principal: Principal | None, rq: DeleteUserRequest) -> None:
        validate_all_fields(rq, USER_RULES)

    def validate_get_user_request(self, principal: Principal | None, rq: GetUserRequest) -> None:
        require_self(principal, rq.user_id)
        validate_all_fields(rq, USER_RULES)

    def validate_list_user_request(self, principal: Principal | None, rq: ListUserRequest) -> None:
        validate_all_fields(rq, USER_RULES)
