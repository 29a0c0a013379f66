"""Database connection and session management."""
import os
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import NullPool
from couples_chat.core.config import settings
from couples_chat.models.base import Base
# Register every table on Base.metadata
from couples_chat.models import chat, knowledge, profile  # noqa: F401


def _create_engine():
    """Create engine: SQLite uses NullPool and check_same_thread=False; PostgreSQL uses pooling."""
    url = make_url(settings.database_url)
    if url.get_backend_name() == "sqlite":
        # File-based SQLite: ensure parent directory exists (skip for :memory:)
        database_path = url.database
        if database_path and database_path != ":memory:":
            parent = os.path.dirname(database_path)
            if parent:
                os.makedirs(parent, exist_ok=True)
        return create_engine(
            settings.database_url,
            connect_args={"check_same_thread": False},
            poolclass=NullPool,
        )
    return create_engine(
        settings.database_url,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


engine = _create_engine()

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db():
    """Initialize database tables."""
    Base.metadata.create_all(bind=engine)


def get_db() -> Session:
    """Dependency for getting database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def run_in_session(fn, *args, **kwargs):
    """Call fn(db, *args, **kwargs) with a private session (for worker threads)."""
    db = SessionLocal()
    try:
        return fn(db, *args, **kwargs)
    finally:
        db.close()
