"""Database engine and session factory construction.

Nothing here is created at import time: the application builds one engine
for its ShareStore at startup, and tests build a fresh in-memory one per test.
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool


def is_sqlite(database_url: str) -> bool:
    return database_url.startswith("sqlite")


def is_in_memory_sqlite(database_url: str) -> bool:
    return database_url in ("sqlite://", "sqlite:///:memory:")


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine suited to the database behind database_url.

    SQLite connections are shared across the request threadpool, and an
    in-memory database must keep a single connection or every session would
    see a different, empty database. Pool sizing only applies to server
    databases.
    """
    engine_kwargs = {
        "pool_pre_ping": True,  # Verify connections before using
        "echo": echo,
    }

    if is_sqlite(database_url):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if is_in_memory_sqlite(database_url):
            engine_kwargs["poolclass"] = StaticPool
    else:
        engine_kwargs["pool_size"] = 5
        engine_kwargs["max_overflow"] = 10

    return create_engine(database_url, **engine_kwargs)


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
    )


@contextmanager
def session_scope(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Context manager for one unit of work.

    Usage:
        with session_scope(factory) as session:
            session.add(row)

    Automatically commits on success, rolls back on exception.
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
