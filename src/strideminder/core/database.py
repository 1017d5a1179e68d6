"""
Database engine and sessions for the gait parameter series.

The raw, hourly, daily and monthly tables live in one database, SQLite by
default. Ingest happens on GaitMonitor worker threads while the CLI and
AggregateStore read, so SQLite connections are opened shareable across
threads and in WAL mode, where a reader sees a consistent snapshot while an
ingest transaction is open.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from .config import get_settings

if TYPE_CHECKING:
    from sqlalchemy import Engine

# Seconds a writer waits on a locked SQLite file before failing
SQLITE_BUSY_TIMEOUT = 30


class Base(DeclarativeBase):
    """Base class for the gait parameter tables."""


_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def is_sqlite(url: str) -> bool:
    return make_url(url).get_backend_name() == "sqlite"


def build_engine(url: str, echo: bool = False) -> Engine:
    """
    Create an engine for ``url``.

    SQLite file databases get ``check_same_thread=False``, a busy timeout and
    ``journal_mode=WAL`` on every new connection. Other backends are created
    unchanged.
    """
    if not is_sqlite(url):
        return create_engine(url, echo=echo)

    engine = create_engine(
        url,
        echo=echo,
        connect_args={"check_same_thread": False, "timeout": SQLITE_BUSY_TIMEOUT},
    )
    in_memory = make_url(url).database in (None, "", ":memory:")

    @event.listens_for(engine, "connect")
    def _configure_sqlite(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        try:
            if not in_memory:
                cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
        finally:
            cursor.close()

    return engine


def get_engine() -> Engine:
    """Engine for the configured database URL, created on first use."""
    global _engine
    if _engine is None:
        settings = get_settings()
        settings.ensure_directories()
        _engine = build_engine(settings.database.url, echo=settings.database.echo)
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    global _session_factory
    if _session_factory is None:
        # Records are copied out as AggregateRecord, so rows may outlive the session
        _session_factory = sessionmaker(bind=get_engine(), expire_on_commit=False)
    return _session_factory


def init_db(engine: Engine | None = None) -> None:
    """Create the raw, hourly, daily and monthly tables if missing."""
    from strideminder.aggregation import models as _  # noqa: F401

    Base.metadata.create_all(engine or get_engine())


@contextmanager
def get_session(
    factory: sessionmaker[Session] | None = None,
) -> Generator[Session, None, None]:
    """One transaction: commit on success, roll back on any exception."""
    session = (factory or get_session_factory())()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def reset_engine() -> None:
    """Dispose the global engine so the next call rebuilds it from settings."""
    global _engine, _session_factory
    if _engine:
        _engine.dispose()
    _engine = None
    _session_factory = None
