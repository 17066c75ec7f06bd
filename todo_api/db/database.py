"""SQLAlchemy engine and session management.

The app factory owns one engine per application; routes receive a session
per request through the ``get_db`` dependency.
"""

from __future__ import annotations

from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from todo_api.core.config import DatabaseSettings

_IN_MEMORY_SQLITE_URLS = {"sqlite://", "sqlite:///:memory:"}


class Base(DeclarativeBase):
    """Base class for all ORM models."""


def build_engine(db_settings: DatabaseSettings) -> Engine:
    """Create the engine for the configured database URL.

    SQLite needs ``check_same_thread=False`` because FastAPI runs sync
    dependencies in a threadpool; in-memory databases also share a single
    connection so every session sees the same tables.
    """
    kwargs: dict = {"echo": db_settings.echo, "pool_pre_ping": True}

    if db_settings.url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if db_settings.url in _IN_MEMORY_SQLITE_URLS:
            kwargs["poolclass"] = StaticPool

    return create_engine(db_settings.url, **kwargs)


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create missing tables. Safe to call repeatedly."""
    # Models must be imported so their tables are registered on Base.metadata
    from todo_api.db import models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db(request: Request) -> Iterator[Session]:
    """FastAPI dependency: yield a session bound to the application's engine."""
    session_factory: sessionmaker[Session] = request.app.state.session_factory
    db = session_factory()
    try:
        yield db
    finally:
        db.close()
