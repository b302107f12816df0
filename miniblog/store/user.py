"""User persistence."""

from miniblog.core import rid
from miniblog.core.errno import UserAlreadyExistsError, UserNotFoundError
from miniblog.models.user import User
from miniblog.store.generic import GenericStore


class UserStore(GenericStore[User]):
    model = User
    not_found = UserNotFoundError
    conflict = UserAlreadyExistsError
    resource_id = ("user_id", rid.USER)
