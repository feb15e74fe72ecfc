import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from qbloader.core.config import settings
from qbloader.models import question, question_set, tournament  # noqa: F401  (register mappers)
from qbloader.models.base import Base


logger = logging.getLogger(__name__)


_engine: Engine | None = None
_SessionLocal: sessionmaker[Session] | None = None


def _install_sqlite_hooks(engine: Engine) -> None:
    # pysqlite defers BEGIN on its own, which breaks SAVEPOINT handling;
    # take over transaction control and turn on foreign keys
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def build_engine(url: str) -> Engine:
    engine = create_engine(url, pool_pre_ping=True)
    if engine.dialect.name == "sqlite":
        _install_sqlite_hooks(engine)
    return engine


def init_engine_if_needed(url: str | None = None) -> Engine:
    """Build the engine and session factory once (lazily)."""
    global _engine, _SessionLocal
    if _engine is not None and _SessionLocal is not None:
        return _engine

    _engine = build_engine(url or settings.DATABASE_URL)
    _SessionLocal = sessionmaker(_engine, expire_on_commit=False, autoflush=False)
    logger.info("SQLAlchemy engine initialized (%s)", _engine.url.render_as_string(hide_password=True))
    return _engine


def create_tables(engine: Engine | None = None) -> None:
    engine = engine or init_engine_if_needed()
    Base.metadata.create_all(engine)


@contextmanager
def get_session() -> Iterator[Session]:
    """Yield a Session and close it afterwards; committing is up to the caller."""
    if _SessionLocal is None:
        init_engine_if_needed()
    assert _SessionLocal is not None
    with _SessionLocal() as session:
        yield session
