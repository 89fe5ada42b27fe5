# manufacturing_api/db/session.py
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Generator, Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from manufacturing_api.core.config import settings

logger = logging.getLogger(__name__)


def _engine():
    url = settings.sqlalchemy_database_url

    connect_args = {}
    if url.startswith("sqlite"):
        # FastAPI runs sync endpoints in a threadpool
        connect_args["check_same_thread"] = False

    # pool_pre_ping: avoid stale connections (useful for Postgres)
    # future=True: SQLAlchemy 2.0 style
    return create_engine(
        url,
        echo=settings.SQL_ECHO,
        future=True,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


engine = _engine()

SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
)


# FastAPI Dependency
def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """
    One commit boundary for a mutation and its audit entry.

    Commits when the block exits normally; any exception rolls back
    everything written in the block and is re-raised unchanged.
    """
    try:
        yield db
        db.commit()
    except Exception:
        logger.warning("Transaction rolled back", exc_info=True)
        db.rollback()
        raise
