"""Session helper for the injury tables.

The tables live in the same SQLite file as the obligation tables.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from sqlalchemy.orm import Session, sessionmaker

from modules.bzr.obligations.repository import get_engine

from .models import InjuryBase


def get_injury_engine(db_path: Path | None = None):
    engine = get_engine(db_path)
    InjuryBase.metadata.create_all(engine)
    return engine


@contextmanager
def with_session(db_path: Path | None = None) -> Iterator[Session]:
    SessionLocal = sessionmaker(bind=get_injury_engine(db_path), expire_on_commit=False)
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
