"""Database session helpers."""
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from .config import get_settings


settings = get_settings()

engine = create_engine(settings.database_url, future=True)
SessionFactory = sessionmaker(bind=engine, expire_on_commit=False, future=True)


def get_db() -> Iterator[Session]:
    """FastAPI dependency that yields a Session."""

    with SessionFactory() as session:
        yield session


@contextmanager
def get_sync_session() -> Iterator[Session]:
    """Context manager for Celery tasks and the CLI importer."""

    with SessionFactory() as session:
        yield session
