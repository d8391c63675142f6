"""
Database connection and session management.
"""
from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from db.models import Base
from config import Config


def make_engine(database_url=None):
    """Create an engine for the configured database (SQLite file by default)."""
    return create_engine(database_url or Config.DATABASE_URL, echo=False)


def make_session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def get_db(session_factory):
    """Get database session."""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


def init_database(engine):
    """Initialize database tables."""
    Base.metadata.create_all(engine)
