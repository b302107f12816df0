"""Business layer."""

from dataclasses import dataclass

from miniblog.core.authz import Authorizer
from miniblog.core.security import TokenIssuer
from miniblog.services.post import PostService
from miniblog.services.user import UserService
from miniblog.store import Datastore

__all__ = ["PostService", "Services", "UserService"]


@dataclass(frozen=True)
class Services:
    user: UserService
    post: PostService

    @classmethod
    def build(cls, ds: Datastore, tokens: TokenIssuer, authz: Authorizer) -> "Services":
        return cls(user=UserService(ds, tokens, authz), post=PostService(ds))
