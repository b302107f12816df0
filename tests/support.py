"""Shared fixtures: a fresh SQLite-backed container per test case."""

import os
import tempfile
import unittest
from unittest.mock import patch

from miniblog.bootstrap import Container, build_container
from miniblog.core.config import Settings
from miniblog.core.context import Principal
from miniblog.schemas.user import CreateUserRequest

TEST_JWT_KEY = "unit-test-signing-key"
DEFAULT_PASSWORD = "miniblog1234"


def make_settings(db_path: str, **overrides) -> Settings:
    values = {
        "database_url": f"sqlite:///{db_path}",
        "jwt": {"key": TEST_JWT_KEY},
    }
    values.update(overrides)
    return Settings(**values)


class ContainerTestCase(unittest.TestCase):
    """Builds a Container on a temporary SQLite file; bcrypt runs with minimum cost."""

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        rounds = patch("miniblog.core.security.BCRYPT_ROUNDS", 4)
        rounds.start()
        self.addCleanup(rounds.stop)
        self.settings = make_settings(os.path.join(self._tmp.name, "miniblog.db"))
        self.container: Container = build_container(self.settings, auto_load_policy=False)
        self.addCleanup(self.container.close)
        self._phone_seq = 0

    def create_user(self, username: str, password: str = DEFAULT_PASSWORD) -> Principal:
        """Create a user through the service layer and return its principal."""
        self._phone_seq += 1
        rsp = self.container.services.user.create(
            CreateUserRequest(
                username=username,
                password=password,
                nickname=username,
                email=f"{username}@example.com",
                phone=f"1380000{self._phone_seq:04d}",
            )
        )
        return Principal(user_id=rsp.user_id, username=username)

    def create_admin(self, username: str = "root") -> Principal:
        """Create a user and give it the administrator role, as the operator script does."""
        user = self.create_user(username)
        self.container.authz.make_admin(user.user_id)
        return Principal(user_id=user.user_id, username=username, is_admin=True)
