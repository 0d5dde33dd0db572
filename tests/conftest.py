"""
Pytest fixtures for testing
"""

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session

from pftrack.infrastructure.db.session import Base
from pftrack.infrastructure.db import models  # noqa: F401  (registers tables)


def _enable_foreign_keys(engine):
    """SQLite ignores ON DELETE rules unless foreign keys are switched on per connection."""
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


@pytest.fixture
def db_engine():
    """Create in-memory SQLite engine for tests"""
    engine = create_engine("sqlite:///:memory:")
    _enable_foreign_keys(engine)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine) -> Session:
    """Create database session for tests"""
    SessionLocal = sessionmaker(bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def file_engine(tmp_path):
    """File-backed SQLite engine: usable from worker threads and the test client"""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'pftrack.db'}",
        connect_args={"check_same_thread": False},
    )
    _enable_foreign_keys(engine)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def file_session_factory(file_engine):
    return sessionmaker(bind=file_engine, autoflush=False, autocommit=False)


@pytest.fixture
def file_session(file_session_factory) -> Session:
    session = file_session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sample_owner_id():
    """Sample owner ID for tests"""
    return 1


@pytest.fixture
def other_owner_id():
    return 2
