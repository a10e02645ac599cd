"""SQLite engine and session lifecycle for the local record store.

Each CLI command opens one store file, runs, and lets go of it again. The
engine is owned by ``session_context`` and disposed with the session, so no
pooled connection outlives the command.
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .schema import create_all


def sqlite_url(sqlite_path: str) -> str:
    return "sqlite:///:memory:" if sqlite_path == ":memory:" else f"sqlite:///{sqlite_path}"


def open_store_engine(sqlite_path: str) -> Engine:
    """Engine for a store file, with the records tables created if missing."""
    engine = create_engine(sqlite_url(sqlite_path), future=True)
    create_all(engine)
    return engine


@contextmanager
def session_context(sqlite_path: str) -> Generator[Session, None, None]:
    """
    Session over one store file.

    Rolls back on error, then closes the session and disposes its engine.
    Commits stay explicit: seeding commits itself, query paths never write.

    Usage:
        with session_context(sqlite_path) as session:
            store = SqliteRecordStore(session)
    """
    engine = open_store_engine(sqlite_path)
    session = sessionmaker(bind=engine, autoflush=False)()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
        engine.dispose()
