"""
Database engine + session factory.

Defaults to the local SQLite snapshot file; any SQLAlchemy URL works.
Query services take a Session argument, so callers own its lifecycle.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from leaderboard.config import DATABASE_URL


class Base(DeclarativeBase):
    pass


def normalize_url(url: str) -> str:
    """SQLAlchemy 2.x only accepts the postgresql:// scheme."""
    if url.startswith('postgres://'):
        return 'postgresql://' + url[len('postgres://'):]
    return url


def make_engine(url: str = DATABASE_URL):
    """Engine for a snapshot store. SQLite handles are shared across request threads."""
    url = normalize_url(url)
    if url.startswith('sqlite'):
        return create_engine(url, connect_args={'check_same_thread': False})
    return create_engine(url, pool_pre_ping=True, pool_size=5, max_overflow=10)


engine = make_engine()

SessionLocal = sessionmaker(bind=engine)


def get_session():
    """Return a new DB session."""
    return SessionLocal()
