"""Shared fixtures: a throwaway SQLite database and template-only responses."""
import os
import tempfile

# Settings are read once at import, so the environment must be ready first
_DB_DIR = tempfile.mkdtemp(prefix="couples_chat_tests_")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["CACHE_ENABLED"] = "false"
os.environ["CHAT_RESPONDER"] = "template"
os.environ["APP_ENV"] = "dev"

import pytest

from couples_chat.database import SessionLocal, engine
from couples_chat.models.base import Base


@pytest.fixture(autouse=True)
def schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
