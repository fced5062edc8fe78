"""
db/session.py

Lazy SQLAlchemy engine and session factory for the shared price table.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from db.config import resolve_database_url


def _get_bool_env(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def engine_options(database_url: str) -> dict[str, Any]:
    """
    Engine keyword arguments for `database_url`'s backend.

    SQLite gets no pool tuning; server databases get pre-ping and recycling
    so long scrape runs survive idle connection drops.
    """

    options: dict[str, Any] = {"echo": _get_bool_env("SQL_ECHO", default=False)}
    backend = make_url(database_url).get_backend_name()
    if backend == "sqlite":
        options["connect_args"] = {"check_same_thread": False}
        return options

    options.update(
        pool_pre_ping=True,
        pool_recycle=_get_int_env("DB_POOL_RECYCLE", 1800),
        pool_size=_get_int_env("DB_POOL_SIZE", 5),
        max_overflow=_get_int_env("DB_MAX_OVERFLOW", 10),
    )
    if backend in {"mysql", "mariadb"}:
        options["connect_args"] = {"charset": "utf8mb4"}
    return options


def create_db_engine(database_url: str | None = None) -> Engine:
    url = database_url or resolve_database_url()
    return create_engine(url, **engine_options(url))


_engine: Engine | None = None
_session_factory: sessionmaker | None = None


def get_engine() -> Engine:
    """Return the shared engine, creating it on first call."""
    global _engine
    if _engine is None:
        _engine = create_db_engine()
    return _engine


def _get_session_factory() -> sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(
            bind=get_engine(),
            class_=Session,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )
    return _session_factory


def SessionLocal() -> Session:
    """Lazy session factory. Drop-in replacement for a sessionmaker() call."""
    return _get_session_factory()()


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
