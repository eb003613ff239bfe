"""
Engine / session management

- `get_db()`: FastAPI dependency, one Session per request
- `create_session()`: bare Session, caller closes it

SQLite connections get `PRAGMA foreign_keys=ON` so contractor_requests.applicant_id
is enforced the same way PostgreSQL enforces it.
"""

from __future__ import annotations

from typing import Any, Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from src.config.settings import config

# PostgreSQL SQLSTATE codes
PG_UNIQUE_VIOLATION = "23505"
PG_FOREIGN_KEY_VIOLATION = "23503"

_engine: Engine | None = None
_SessionLocal: sessionmaker | None = None


def get_db_url() -> str:
    return config.database_url


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(url: str | None = None, **kwargs: Any) -> Engine:
    """Build an engine with the pool settings for its dialect."""
    url = url or get_db_url()
    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            echo=config.db_echo,
            **kwargs,
        )
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    if "poolclass" not in kwargs:
        kwargs.setdefault("pool_size", config.db_pool_size)
        kwargs.setdefault("max_overflow", config.db_max_overflow)
    return create_engine(
        url,
        pool_pre_ping=True,
        echo=config.db_echo,
        **kwargs,
    )


def _get_session_factory() -> sessionmaker:
    global _engine, _SessionLocal
    if _SessionLocal is None:
        _engine = create_db_engine()
        _SessionLocal = sessionmaker(bind=_engine, autocommit=False, autoflush=False)
    return _SessionLocal


def create_session() -> Session:
    return _get_session_factory()()


def get_db() -> Generator[Session, None, None]:
    db = create_session()
    try:
        yield db
    finally:
        db.close()


def _sqlstate(exc: IntegrityError) -> str | None:
    orig = getattr(exc, "orig", None)
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def is_unique_violation(exc: IntegrityError) -> bool:
    if _sqlstate(exc) == PG_UNIQUE_VIOLATION:
        return True
    text = str(getattr(exc, "orig", exc)).upper()
    return "UNIQUE CONSTRAINT" in text or "DUPLICATE KEY" in text


def is_foreign_key_violation(exc: IntegrityError) -> bool:
    if _sqlstate(exc) == PG_FOREIGN_KEY_VIOLATION:
        return True
    text = str(getattr(exc, "orig", exc)).upper()
    return "FOREIGN KEY CONSTRAINT" in text
