"""Database engine and session factory construction."""

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from miniblog.core.config import Settings


def create_db_engine(settings: Settings) -> Engine:
    """Create the shared engine; its pool is shared by every request."""
    url = settings.sqlalchemy_url
    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            echo=settings.log_level == "DEBUG",
        )
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    mysql = settings.mysql
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=mysql.max_idle_connections,
        max_overflow=max(0, mysql.max_open_connections - mysql.max_idle_connections),
        pool_recycle=max(1, int(mysql.max_connection_life_time.total_seconds())),
        echo=settings.log_level == "DEBUG",
    )


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Sessions keep loaded attributes after commit so records outlive their session."""
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def check_db_connected(db: Session) -> bool:
    """Run a trivial query to verify the database is reachable."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except Exception:
        return False


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
