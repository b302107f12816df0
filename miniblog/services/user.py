"""
User business logic: authentication, profile CRUD and listing.

Listing counts each returned user's posts with a bounded pool of worker threads
(at most MAX_FANOUT_CONCURRENCY at a time). The first failing count stops the
workers that have not started yet and fails the whole call; partial results
are discarded.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime

import jwt

from miniblog.core.authz import Authorizer
from miniblog.core.context import Principal
from miniblog.core.errno import PasswordInvalidError, SignTokenError, UserNotFoundError
from miniblog.core.errors import NotFoundError, OperationFailedError
from miniblog.core.known import MAX_FANOUT_CONCURRENCY, ROLE_USER
from miniblog.core.security import TokenIssuer, hash_password, verify_password
from miniblog.models.user import User as UserModel
from miniblog.schemas.auth import (
    ChangePasswordRequest,
    ChangePasswordResponse,
    LoginRequest,
    LoginResponse,
    RefreshTokenRequest,
    RefreshTokenResponse,
)
from miniblog.schemas.user import (
    CreateUserRequest,
    CreateUserResponse,
    DeleteUserRequest,
    DeleteUserResponse,
    GetUserRequest,
    GetUserResponse,
    ListUserRequest,
    ListUserResponse,
    UpdateUserRequest,
    UpdateUserResponse,
    User,
)
from miniblog.store import Datastore, Where
from miniblog.store.generic import copy_fields

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, ds: Datastore, tokens: TokenIssuer, authz: Authorizer) -> None:
        self._ds = ds
        self._tokens = tokens
        self._authz = authz

    def login(self, rq: LoginRequest) -> LoginResponse:
        """Check credentials and issue a token carrying the user's id."""
        try:
            user = self._ds.user().get(Where(username=rq.username))
        except NotFoundError:
            raise UserNotFoundError()
        if not verify_password(rq.password, user.password):
            logger.info("Login failed for %s: password mismatch", rq.username)
            raise PasswordInvalidError()
        token, expire_at = self._sign(user.user_id)
        return LoginResponse(token=token, expire_at=expire_at)

    def refresh_token(self, principal: Principal, rq: RefreshTokenRequest) -> RefreshTokenResponse:
        token, expire_at = self._sign(principal.user_id)
        return RefreshTokenResponse(token=token, expire_at=expire_at)

    def change_password(self, principal: Principal, rq: ChangePasswordRequest) -> ChangePasswordResponse:
        """Replace the caller's password; the stored hash is untouched if old_password is wrong."""
        user = self._ds.user().get(Where().with_tenant(principal.user_id))
        if not verify_password(rq.old_password, user.password):
            logger.info("Change password failed for %s: password mismatch", principal.user_id)
            raise PasswordInvalidError()
        user.password = hash_password(rq.new_password)
        self._ds.user().update(user)
        return ChangePasswordResponse()

    def create(self, rq: CreateUserRequest) -> CreateUserResponse:
        """
        Create an account holding role::user. The administrator role is only
        granted by the operator script. If the grant fails the account is removed
        again, so no user exists without a role.
        """
        user = UserModel(
            username=rq.username,
            password=hash_password(rq.password),
            nickname=rq.nickname or "",
            email=rq.email,
            phone=rq.phone,
        )
        self._ds.user().create(user)
        try:
            self._authz.grant_role(user.user_id, ROLE_USER)
        except Exception as e:
            logger.error("Failed to grant %s to %s: %s", ROLE_USER, user.user_id, e)
            self._ds.user().delete(Where(user_id=user.user_id))
            raise OperationFailedError().with_message("failed to assign role to new user") from e
        logger.info("Created user %s (%s)", user.user_id, user.username)
        return CreateUserResponse(user_id=user.user_id)

    def update(self, principal: Principal, rq: UpdateUserRequest) -> UpdateUserResponse:
        user = self._ds.user().get(Where().with_tenant(principal.user_id))
        copy_fields(
            user,
            {"username": rq.username, "nickname": rq.nickname, "email": rq.email, "phone": rq.phone},
        )
        self._ds.user().update(user)
        return UpdateUserResponse()

    def delete(self, principal: Principal, rq: DeleteUserRequest) -> DeleteUserResponse:
        """
        Delete any user by id. Not owner-scoped: scoping would limit the
        administrator to deleting itself; authorization restricts who may call this.
        """
        self._ds.user().delete(Where(user_id=rq.user_id))
        self._authz.revoke_subject(rq.user_id)
        logger.info("User %s deleted user %s", principal.user_id, rq.user_id)
        return DeleteUserResponse()

    def get(self, principal: Principal, rq: GetUserRequest) -> GetUserResponse:
        user = self._ds.user().get(Where().with_tenant(principal.user_id))
        return GetUserResponse(user=User.model_validate(user))

    def list(
        self, principal: Principal, rq: ListUserRequest, cancelled: threading.Event | None = None
    ) -> ListUserResponse:
        """
        List users with their post counts. Non-administrators only see themselves.
        Setting cancelled makes pending workers skip their query and the call fail.
        """
        total, users = self._ds.user().list(self._list_where(principal, rq))
        counts = self._count_posts(users, cancelled)
        if cancelled is not None and cancelled.is_set():
            raise OperationFailedError().with_message("request cancelled")
        items = [self._to_user(u, counts[u.id]) for u in users]
        logger.debug("Get users from backend storage: count=%d", len(items))
        return ListUserResponse(total_count=total, users=items)

    def list_with_bad_performance(self, principal: Principal, rq: ListUserRequest) -> ListUserResponse:
        """Sequential equivalent of list(); kept as a baseline for comparison."""
        total, users = self._ds.user().list(self._list_where(principal, rq))
        items = []
        for u in users:
            count = self._ds.post().count(Where().with_tenant(u.user_id))
            items.append(self._to_user(u, count))
        logger.debug("Get users from backend storage: count=%d", len(items))
        return ListUserResponse(total_count=total, users=items)

    def _sign(self, user_id: str) -> tuple[str, datetime]:
        try:
            return self._tokens.sign(user_id)
        except (jwt.PyJWTError, TypeError, ValueError) as e:
            logger.error("Failed to sign token for %s: %s", user_id, e)
            raise SignTokenError() from e

    @staticmethod
    def _list_where(principal: Principal, rq: ListUserRequest) -> Where:
        whr = Where().paginate(rq.offset, rq.limit)
        if not principal.is_admin:
            whr.with_tenant(principal.user_id)
        return whr

    def _count_posts(self, users: list[UserModel], cancelled: threading.Event | None = None) -> dict[int, int]:
        """Post count per user primary key, queried concurrently."""
        if not users:
            return {}
        stop = threading.Event()
        results: dict[int, int] = {}
        lock = threading.Lock()

        def count_one(user: UserModel) -> None:
            if stop.is_set() or (cancelled is not None and cancelled.is_set()):
                return
            n = self._ds.post().count(Where().with_tenant(user.user_id))
            with lock:
                results[user.id] = n

        workers = min(MAX_FANOUT_CONCURRENCY, len(users))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="count-posts") as pool:
            futures = [pool.submit(count_one, u) for u in users]
            try:
                for future in as_completed(futures):
                    future.result()
            except Exception:
                stop.set()
                for future in futures:
                    future.cancel()
                logger.error("Failed to count posts for all users", exc_info=True)
                raise
        return results

    @staticmethod
    def _to_user(user: UserModel, post_count: int) -> User:
        converted = User.model_validate(user)
        converted.post_count = post_count
        return converted
