"""SQLAlchemy engine/session helpers and the key-value table.

Usage
-----
from expense_tracker.db import session_scope

with session_scope(database_url="sqlite+pysqlite:///tracker.db") as s:
    s.execute(...)

The schema is a single ``kv_entries`` table created with
``metadata.create_all``; there are no migrations.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime

from sqlalchemy import DateTime, String, Text, create_engine, func
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

_ENGINES: dict[str, Engine] = {}
_SESSION_MAKERS: dict[str, sessionmaker[Session]] = {}


class Base(DeclarativeBase):
    pass


class KvEntry(Base):
    __tablename__ = "kv_entries"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.current_timestamp(),
        onupdate=func.current_timestamp(),
    )


def get_engine(*, database_url: str) -> Engine:
    """Return the engine for ``database_url``, creating it and the schema on first use."""

    engine = _ENGINES.get(database_url)
    if engine is None:
        engine = create_engine(database_url, pool_pre_ping=True)
        Base.metadata.create_all(bind=engine)
        _SESSION_MAKERS[database_url] = sessionmaker(bind=engine, expire_on_commit=False, class_=Session)
        _ENGINES[database_url] = engine
    return engine


def get_session(*, database_url: str) -> Session:
    """Return a new session bound to the shared engine for ``database_url``."""

    get_engine(database_url=database_url)
    return _SESSION_MAKERS[database_url]()


@contextmanager
def session_scope(*, database_url: str) -> Iterator[Session]:
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


def dispose_engines() -> None:
    """Dispose every cached engine (used by tests between databases)."""

    for engine in _ENGINES.values():
        engine.dispose()
    _ENGINES.clear()
    _SESSION_MAKERS.clear()


__all__ = [
    "Base",
    "KvEntry",
    "get_engine",
    "get_session",
    "session_scope",
    "dispose_engines",
]
