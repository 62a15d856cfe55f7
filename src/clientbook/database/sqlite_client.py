from contextlib import contextmanager
from typing import Generator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .migrate import stamp_schema_version
from .schema import create_all

MEMORY_PATH = ":memory:"


def get_engine(sqlite_path: str) -> Engine:
    """
    Create an engine for a SQLite file (or ":memory:") and ensure the schema.

    Connections are shared with worker threads, so same-thread checking is off.
    An in-memory database keeps a single connection; otherwise every pooled
    connection would see its own empty database.
    """
    if sqlite_path == MEMORY_PATH:
        engine = create_engine(
            "sqlite://",
            future=True,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        engine = create_engine(
            f"sqlite:///{sqlite_path}",
            future=True,
            connect_args={"check_same_thread": False},
        )
    create_all(engine)
    stamp_schema_version(engine)
    return engine


def get_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


@contextmanager
def session_scope(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """
    Context manager for SQLAlchemy sessions.

    Rolls back on error and always closes. Commits stay explicit in the caller.

    Usage:
        with session_scope(factory) as session:
            upsert_client(session, record)
            session.commit()
    """
    session = session_factory()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
