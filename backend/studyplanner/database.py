"""Database engine and helpers.

This module configures the SQLModel/SQLAlchemy engine (the shared
connection pool) and provides the dependencies used by the application
and tests. The engine is handed to request code through `get_engine` so
a different database can be injected by overriding that one dependency.
"""

from contextlib import contextmanager
from typing import Iterator

from fastapi import Depends
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, Session, create_engine

from .config import settings


def _connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.DATABASE_URL,
    echo=False,
    connect_args=_connect_args(settings.DATABASE_URL),
)


def create_db_and_tables(bind: Engine = engine):
    """Create database tables using SQLModel metadata.

    Intended for local development and tests; production deployments
    should manage the schema with a migration tool instead.
    """
    from . import models  # noqa: F401  registers the tables

    SQLModel.metadata.create_all(bind)


def get_engine() -> Engine:
    """Return the pooled engine used by request handlers."""
    return engine


def get_session(bind: Engine = Depends(get_engine)):
    """Yield a database `Session` for FastAPI dependency injection.

    The session is closed, and its connection returned to the pool,
    when the request scope finishes.
    """
    with Session(bind) as session:
        yield session


@contextmanager
def transaction(bind: Engine) -> Iterator[Session]:
    """Run a block on a dedicated session inside a single transaction.

    Commits when the block exits normally, rolls back when it raises.
    The connection is released back to the pool on every exit path.
    """
    with Session(bind) as session:
        with session.begin():
            yield session
