"""Centralized SQLAlchemy engine/session helpers for the ledger database.

Usage
-----
from ledger_db.client import init_db, session_scope

init_db()
with session_scope() as s:
    s.execute(...)

Engines are cached per URL so tests that point ``DATABASE_URL`` at a fresh
SQLite file per test get a fresh engine without restarting the process.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .models.ledger import Base

DEFAULT_DATABASE_URL = "sqlite+pysqlite:///quickbudget.db"

_ENGINES: dict[str, Engine] = {}
_SESSION_MAKERS: dict[str, sessionmaker[Session]] = {}


def database_url(override: str | None = None) -> str:
    return override or os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL


def get_engine(*, database_url: str | None = None) -> Engine:
    """Return the engine for ``database_url``, creating it on first use."""

    url = _resolve(database_url)
    engine = _ENGINES.get(url)
    if engine is None:
        engine = create_engine(url, pool_pre_ping=True)
        _ENGINES[url] = engine
        _SESSION_MAKERS[url] = sessionmaker(bind=engine, expire_on_commit=False, class_=Session)
    return engine


def get_session(*, database_url: str | None = None) -> Session:
    """Return a new SQLAlchemy session bound to the cached engine."""

    url = _resolve(database_url)
    get_engine(database_url=url)
    return _SESSION_MAKERS[url]()


@contextmanager
def session_scope(*, database_url: str | None = None) -> Iterator[Session]:
    """Provide a transactional scope around a series of operations."""

    session = get_session(database_url=database_url)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(*, database_url: str | None = None) -> Engine:
    """Create the ledger tables when missing and return the engine."""

    engine = get_engine(database_url=database_url)
    Base.metadata.create_all(engine)
    return engine


def dispose_engines() -> None:
    for engine in _ENGINES.values():
        engine.dispose()
    _ENGINES.clear()
    _SESSION_MAKERS.clear()


def _resolve(override: str | None) -> str:
    return database_url(override)


__all__ = [
    "DEFAULT_DATABASE_URL",
    "database_url",
    "get_engine",
    "get_session",
    "session_scope",
    "init_db",
    "dispose_engines",
]
