"""
Pytest configuration and fixtures.
"""

from __future__ import annotations

import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from tests.test_constants import TEST_INTERNAL_JOB_TOKEN

# The app-level engine is never used for data in tests; each test gets its own database.
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ.setdefault("INTERNAL_JOB_TOKEN", TEST_INTERNAL_JOB_TOKEN)


@pytest.fixture
def engine(tmp_path):
    """Fresh schema per test.

    SQLite file in tmp_path by default (threads can share it); set
    TEST_DATABASE_URL to run against PostgreSQL instead.
    """
    import leakguard.models  # noqa: F401  (registers all tables)
    from leakguard.db.session import Base, build_engine

    url = os.getenv("TEST_DATABASE_URL") or f"sqlite:///{tmp_path / 'leakguard_test.db'}"
    test_engine = build_engine(url)
    Base.metadata.drop_all(test_engine)
    Base.metadata.create_all(test_engine)
    try:
        yield test_engine
    finally:
        Base.metadata.drop_all(test_engine)
        test_engine.dispose()


@pytest.fixture
def session_factory(engine) -> sessionmaker:
    """Session factory bound to the per-test engine (same options as SessionLocal)."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory) -> Session:
    """Database session for service tests."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client() -> TestClient:
    """FastAPI test client (no database override)."""
    from leakguard.main import app

    return TestClient(app)


@pytest.fixture
def client_with_db(session_factory) -> TestClient:
    """TestClient with get_db overridden to use the per-test database."""
    from leakguard.db.session import get_db
    from leakguard.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    c = TestClient(app)
    yield c
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def settings():
    """Cached Settings instance; monkeypatch attributes to change detector windows."""
    from leakguard.config import get_settings

    return get_settings()
