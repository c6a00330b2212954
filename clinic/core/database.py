from functools import lru_cache
from typing import Generator

import redis
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .config import get_settings

Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores foreign keys (and ON DELETE RESTRICT) unless asked per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


@lru_cache
def get_engine() -> Engine:
    """Create the process-wide engine (and its connection pool)."""
    url = get_settings().DATABASE_URL
    if url.startswith("sqlite"):
        engine = create_engine(url, connect_args={"check_same_thread": False})
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_engine(
        url,
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=1800,  # Recycle connections after 30 minutes
    )


@lru_cache
def get_sessionmaker() -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=get_engine())


@lru_cache
def get_redis_client() -> redis.Redis:
    return redis.from_url(get_settings().REDIS_URL, decode_responses=True)


# Database dependency
def get_db() -> Generator[Session, None, None]:
    """Get database session."""
    db = get_sessionmaker()()
    try:
        yield db
    finally:
        db.close()


# Redis dependency
def get_redis() -> redis.Redis:
    """Get Redis client."""
    return get_redis_client()


# Database initialization
def init_db(engine: Engine = None):
    """Initialize database tables."""
    # Register every mapped table on Base.metadata
    from ..models import appointment, diagnosis, doctor, patient, timeslot, user  # noqa: F401

    Base.metadata.create_all(bind=engine or get_engine())
