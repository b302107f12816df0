"""
Process-wide dependencies, built once at startup and passed down explicitly.

Tests build their own Container per case, so nothing here is a global.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.engine import Engine

from miniblog.core.authz import Authorizer
from miniblog.core.config import Settings
from miniblog.core.database import create_db_engine
from miniblog.core.security import TokenIssuer
from miniblog.models import Base
from miniblog.services import Services
from miniblog.store import Datastore
from miniblog.validation import Validator

logger = logging.getLogger(__name__)


@dataclass
class Container:
    settings: Settings
    engine: Engine
    datastore: Datastore
    authz: Authorizer
    tokens: TokenIssuer
    validator: Validator
    services: Services

    def close(self) -> None:
        self.authz.close()
        self.datastore.close()


def new_token_issuer(settings: Settings) -> TokenIssuer:
    return TokenIssuer(
        key=settings.jwt.key.get_secret_value(),
        identity_key=settings.jwt.identity_key,
        expiration=settings.jwt.expiration,
    )


def build_container(
    settings: Settings,
    *,
    engine: Engine | None = None,
    create_tables: bool | None = None,
    auto_load_policy: bool = True,
) -> Container:
    """
    Wire engine, stores, authorizer, token issuer, validator and services.

    Tables are created from the ORM metadata when create_tables is true; by
    default only for SQLite (MySQL schemas are managed with alembic).
    """
    engine = engine or create_db_engine(settings)
    if create_tables is None:
        create_tables = engine.dialect.name == "sqlite"
    if create_tables:
        Base.metadata.create_all(engine)

    datastore = Datastore(engine)
    authz = Authorizer(
        engine,
        auto_load_interval=settings.authz_reload_interval if auto_load_policy else None,
    )
    authz.ensure_default_policies()
    tokens = new_token_issuer(settings)
    logger.info("Container ready (database=%s)", engine.url.render_as_string(hide_password=True))
    return Container(
        settings=settings,
        engine=engine,
        datastore=datastore,
        authz=authz,
        tokens=tokens,
        validator=Validator(),
        services=Services.build(datastore, tokens, authz),
    )
