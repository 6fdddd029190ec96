"""
db/session.py

Lazily-built engine plus the two ways callers obtain a session: the
FastAPI ``get_db`` dependency and the ``session_scope`` context manager
used by the Streamlit dashboard.
"""

from __future__ import annotations

import os
from collections.abc import Generator, Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from db.config import resolve_database_url

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def _pool_setting(name: str, default: int) -> int:
    try:
        return max(0, int(os.getenv(name, default)))
    except ValueError:
        return default


def get_engine() -> Engine:
    """Return the process-wide engine, creating it on first use."""
    global _engine
    if _engine is None:
        database_url = resolve_database_url()
        if not database_url.startswith("postgresql"):
            raise RuntimeError("SalesPulse stores datasets in PostgreSQL only.")
        _engine = create_engine(
            database_url,
            echo=os.getenv("SQL_ECHO", "").strip().lower() in {"1", "true", "yes", "on"},
            pool_pre_ping=True,
            pool_recycle=_pool_setting("DB_POOL_RECYCLE", 1800),
            pool_size=_pool_setting("DB_POOL_SIZE", 5),
            max_overflow=_pool_setting("DB_MAX_OVERFLOW", 10),
        )
    return _engine


def new_session() -> Session:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(
            bind=get_engine(),
            autoflush=False,
            expire_on_commit=False,
        )
    return _session_factory()


def get_db() -> Generator[Session, None, None]:
    db = new_session()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope() -> Iterator[Session]:
    """
    Session for non-request callers. Services commit their own work; anything
    left uncommitted when the block raises is rolled back.
    """
    db = new_session()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
