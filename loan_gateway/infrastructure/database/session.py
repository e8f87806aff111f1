"""Database session management with connection pooling"""

from contextlib import contextmanager
from typing import Callable, Iterator
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from loan_gateway.config import settings

# Connection pool: max 20 connections, recycle after 1 hour to avoid stale connections
engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,  # Verify connections before using
    pool_size=10,
    max_overflow=10,
    pool_recycle=3600,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

SessionFactory = Callable[[], Session]


def get_db() -> Iterator[Session]:
    """Dependency injection for database sessions"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_factory() -> SessionFactory:
    """Session factory for work that outlives the request session (background tasks)"""
    return SessionLocal


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """
    Scope a group of reads and writes to one transaction.

    Commits when the block exits normally; any exception (including
    business rule rejections raised mid-block) rolls everything back
    and propagates to the caller.
    """
    try:
        yield db
        db.commit()
    except BaseException:
        db.rollback()
        raise
