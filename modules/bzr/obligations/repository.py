"""Database routing helpers for the legal obligation tables."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from utils.app_settings import load_settings

from .models import Base

_engine_cache: Dict[str, Any] = {}


def _enable_foreign_keys(dbapi_connection, _record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_engine(db_path: Path | None = None):
    """Return an engine bound to the BZR database, creating tables once."""
    path = Path(db_path or load_settings().database_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    key = str(path.resolve())
    engine = _engine_cache.get(key)
    if engine is None:
        engine = create_engine(f"sqlite:///{path}")
        event.listen(engine, "connect", _enable_foreign_keys)
        Base.metadata.create_all(engine)
        _engine_cache[key] = engine
    return engine


@contextmanager
def with_session(db_path: Path | None = None) -> Iterator[Session]:
    """Context manager yielding a session; commits on success."""
    engine = get_engine(db_path)
    SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def dispose_engines() -> None:
    for engine in _engine_cache.values():
        engine.dispose()
    _engine_cache.clear()
