"""Database engine and session management utilities.

The engine and session factory are process-wide and owned here; components
that need storage receive a Session (usually wrapped in a MatchStore) rather
than creating their own connections. Emitted SQL is logged through the
``sqlalchemy.engine`` logger when ``HOOP_SQL_ECHO`` is set, see
:func:`hoop_rivals.logging.setup_logging`.

Example:
    >>> from hoop_rivals.data.db import session_scope, init_db
    >>> init_db()
    >>> with session_scope() as session:
    ...     store = MatchStore(session)
"""
from __future__ import annotations

import logging
from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from sqlalchemy import Engine, MetaData, create_engine, event, inspect, text
from sqlalchemy.orm import Session, scoped_session, sessionmaker

from hoop_rivals.config import get_settings
from hoop_rivals.data.schema import Base

logger = logging.getLogger(__name__)

_engine: Engine | None = None
_session_factory: scoped_session[Session] | None = None


@dataclass(frozen=True)
class DatabaseInfo:
    """Connection-level state of the store's SQLite database.

    Attributes:
        foreign_keys: Whether foreign keys are enforced on new connections.
        journal_mode: SQLite journal mode ("wal" for file databases,
            "memory" for in-memory ones).
        missing_tables: Model tables not yet created, sorted by name.
    """

    foreign_keys: bool
    journal_mode: str
    missing_tables: tuple[str, ...]

    @property
    def ready(self) -> bool:
        """True when stat rows can be written safely."""
        return self.foreign_keys and not self.missing_tables


def _metadata() -> MetaData:
    # Importing the models registers their tables on Base
    from hoop_rivals.data import models  # noqa: F401

    return Base.metadata


def _set_sqlite_pragmas(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    # WAL lets report readers proceed while a stat correction commits
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.close()


def sqlite_url(db_path: str | Path) -> str:
    """SQLAlchemy URL for a SQLite file."""
    return f"sqlite:///{Path(db_path)}"


def create_db_engine(db_url: str) -> Engine:
    """Create an engine with foreign keys and WAL applied to every connection.

    Args:
        db_url: SQLAlchemy database URL, e.g. ``sqlite:///data/hoop.db`` or
            ``sqlite://`` for an in-memory database.

    Returns:
        SQLAlchemy Engine instance.
    """
    engine = create_engine(db_url, pool_pre_ping=True)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _set_sqlite_pragmas)
    logger.debug(f"Created database engine: {db_url}")
    return engine


def get_engine() -> Engine:
    """Get the process-wide engine for ``settings.db_path``, creating it once."""
    global _engine
    if _engine is None:
        db_path = get_settings().db_path_obj
        db_path.parent.mkdir(parents=True, exist_ok=True)
        _engine = create_db_engine(sqlite_url(db_path))
    return _engine


def get_session() -> Session:
    """Get the calling thread's session from the scoped session factory."""
    global _session_factory
    if _session_factory is None:
        _session_factory = scoped_session(sessionmaker(bind=get_engine()))
    return _session_factory()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """Run a unit of work: commit on success, roll back and re-raise on error.

    A rejected stat submission therefore leaves no rows behind even if some
    were flushed before the error surfaced. The session is always closed.

    Yields:
        SQLAlchemy Session instance.
    """
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        logger.debug("Rolling back session")
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine: Engine | None = None) -> list[str]:
    """Create any missing tables.

    Safe to call before every command; existing tables are left untouched.

    Args:
        engine: Engine to initialize; defaults to the settings engine.

    Returns:
        Names of the tables created by this call, empty when the schema was
        already in place.
    """
    engine = engine or get_engine()
    metadata = _metadata()
    existing = set(inspect(engine).get_table_names())
    metadata.create_all(engine)

    created = [name for name in metadata.tables if name not in existing]
    if created:
        logger.debug(f"Created tables: {', '.join(created)}")
    return created


def inspect_database(engine: Engine | None = None) -> DatabaseInfo:
    """Read pragmas and compare the schema against the models.

    Args:
        engine: Engine to inspect; defaults to the settings engine.

    Returns:
        DatabaseInfo for a fresh connection.
    """
    engine = engine or get_engine()
    expected = set(_metadata().tables)
    with engine.connect() as conn:
        foreign_keys = conn.execute(text("PRAGMA foreign_keys")).scalar() == 1
        journal_mode = str(conn.execute(text("PRAGMA journal_mode")).scalar())
        present = set(inspect(conn).get_table_names())
    return DatabaseInfo(
        foreign_keys=foreign_keys,
        journal_mode=journal_mode,
        missing_tables=tuple(sorted(expected - present)),
    )


def reset_engine() -> None:
    """Dispose of the engine and session factory (for testing)."""
    global _engine, _session_factory
    if _session_factory is not None:
        _session_factory.remove()
        _session_factory = None
    if _engine is not None:
        _engine.dispose()
        _engine = None
