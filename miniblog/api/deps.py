"""FastAPI dependencies: container access, authentication and casbin authorization."""

from typing import Annotated

from fastapi import Depends, Request

from miniblog.bootstrap import Container
from miniblog.core.authn import authenticate
from miniblog.core.context import Principal


def get_container(request: Request) -> Container:
    """The container the application was created with."""
    return request.app.state.container


ContainerDep = Annotated[Container, Depends(get_container)]


def get_current_user(request: Request, container: ContainerDep) -> Principal:
    """Dependency: require a valid Bearer token whose user still exists. Raises 401."""
    principal, _ = authenticate(container.tokens, container.datastore, container.authz, request)
    request.state.principal = principal
    return principal


def authorize(
    request: Request,
    container: ContainerDep,
    principal: Annotated[Principal, Depends(get_current_user)],
) -> Principal:
    """Dependency: casbin check of (user id, request path, HTTP method). Raises 403."""
    container.authz.require(principal.user_id, request.url.path, request.method)
    return principal


CurrentUser = Annotated[Principal, Depends(authorize)]
