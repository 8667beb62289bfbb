"""
Database configuration and session management for the globe backend.

This module defines a SQLModel engine targeting a SQLite database in
the configured storage directory.  The only tables are the texture
cache index defined in :mod:`texture_store`; no routes, pins or
sessions are ever persisted.
"""

from __future__ import annotations

from sqlmodel import SQLModel, create_engine, Session

from .. import config

STORAGE_DIR = config.STORAGE_DIR
STORAGE_DIR.mkdir(parents=True, exist_ok=True)

# The texture cache is read and written from worker threads.
engine = create_engine(
    f"sqlite:///{(STORAGE_DIR / 'globe.db').as_posix()}",
    echo=False,
    connect_args={"check_same_thread": False},
)


def create_db_and_tables() -> None:
    """Create all tables in the database.

    Safe to call repeatedly; existing tables are left untouched.
    """
    SQLModel.metadata.create_all(engine)


def get_session() -> Session:
    """Return a new SQLModel session bound to the engine.

    Use as a context manager (``with get_session() as session: ...``).
    """
    return Session(engine)
