"""SQLAlchemy engine and session factories for the CMS tables."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from functools import lru_cache
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from cms.core.config import get_settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # TestClient and uvicorn workers touch the connection from other threads
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


@lru_cache
def get_engine() -> Engine:
    url = (get_settings().database_url or "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL is not set; the CMS needs a database to store users and groups.")
    engine = create_engine(url, future=True, **_engine_options(url))
    logger.info("Database engine ready (%s)", engine.url.render_as_string(hide_password=True))
    return engine


@lru_cache
def _get_sessionmaker() -> sessionmaker:
    return sessionmaker(bind=get_engine(), autoflush=False, expire_on_commit=True, future=True)


@contextmanager
def get_session() -> Iterator[Session]:
    """Plain session; callers commit themselves."""
    session: Session = _get_sessionmaker()()
    try:
        yield session
    finally:
        session.close()


@contextmanager
def transaction() -> Iterator[Session]:
    """Session that commits when the block exits and rolls back on database errors."""
    with get_session() as session:
        try:
            yield session
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            raise
