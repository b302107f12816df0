"""Casbin-backed authorization with policies persisted in the casbin_rule table."""

import logging

import casbin
from casbin.model import Model
from casbin_sqlalchemy_adapter import Adapter
from sqlalchemy.engine import Engine

from miniblog.core.errors import OperationFailedError, PermissionDeniedError
from miniblog.core.known import ROLE_ADMIN, ROLE_USER

logger = logging.getLogger(__name__)

# Anything not explicitly denied is allowed for subjects holding a matching role.
DEFAULT_ACL_MODEL = """
[request_definition]
r = sub, obj, act

[policy_definition]
p = sub, obj, act, eft

[role_definition]
g = _, _

[policy_effect]
e = !some(where (p.eft == deny))

[matchers]
m = g(r.sub, p.sub) && keyMatch(r.obj, p.obj) && r.act == p.act
"""

# Only administrators may delete users, over either transport.
DEFAULT_POLICIES = (
    (ROLE_USER, "/miniblog.v1.MiniBlog/DeleteUser", "CALL", "deny"),
    (ROLE_USER, "/v1/users/*", "DELETE", "deny"),
)

DEFAULT_AUTO_LOAD_INTERVAL = 10.0


class Authorizer:
    """
    Thread-safe enforcer. Checks read the in-memory policy copy, refreshed from
    the database on a background timer when auto_load_interval is set.
    """

    def __init__(
        self,
        engine: Engine,
        model_text: str = DEFAULT_ACL_MODEL,
        auto_load_interval: float | None = DEFAULT_AUTO_LOAD_INTERVAL,
    ) -> None:
        model = Model()
        model.load_model_from_text(model_text)
        self._enforcer = casbin.SyncedEnforcer(model, Adapter(engine))
        self._enforcer.load_policy()
        if auto_load_interval:
            self._enforcer.start_auto_load_policy(auto_load_interval)

    def authorize(self, subject: str, obj: str, action: str) -> bool:
        """True if subject may perform action on obj. Evaluation failures propagate."""
        allowed = bool(self._enforcer.enforce(subject, obj, action))
        logger.debug("Authorize: subject=%s object=%s action=%s allowed=%s", subject, obj, action, allowed)
        return allowed

    def ensure_default_policies(self) -> None:
        """Install the built-in deny rules if they are missing (idempotent)."""
        for rule in DEFAULT_POLICIES:
            if not self._enforcer.has_policy(*rule):
                self._enforcer.add_policy(*rule)

    def grant_role(self, subject: str, role: str = ROLE_USER) -> None:
        if not self._enforcer.has_grouping_policy(subject, role):
            self._enforcer.add_grouping_policy(subject, role)

    def grant_admin(self, subject: str) -> None:
        self.grant_role(subject, ROLE_ADMIN)

    def make_admin(self, subject: str) -> None:
        """Replace every role of subject with the administrator role."""
        self.revoke_subject(subject)
        self.grant_admin(subject)

    def has_role(self, subject: str, role: str) -> bool:
        return bool(self._enforcer.has_grouping_policy(subject, role))

    def is_admin(self, subject: str) -> bool:
        return self.has_role(subject, ROLE_ADMIN)

    def revoke_subject(self, subject: str) -> None:
        """Drop every role grant held by subject."""
        self._enforcer.remove_filtered_grouping_policy(0, subject)

    def load_policy(self) -> None:
        self._enforcer.load_policy()

    def close(self) -> None:
        if self._enforcer.is_auto_loading_running():
            self._enforcer.stop_auto_load_policy()

    def require(self, subject: str, obj: str, action: str) -> None:
        """Raise PermissionDeniedError if not allowed, OperationFailedError if evaluation fails."""
        try:
            allowed = self.authorize(subject, obj, action)
        except Exception as e:
            logger.error("Authorization failed to evaluate for %s %s %s: %s", subject, action, obj, e)
            raise OperationFailedError().with_message("authorization could not be evaluated") from e
        if not allowed:
            logger.info("Permission denied: subject=%s object=%s action=%s", subject, obj, action)
            raise PermissionDeniedError()
