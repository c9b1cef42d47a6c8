"""
Pytest configuration and fixtures.
"""

from __future__ import annotations

import os
import tempfile

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from tests.test_constants import (
    TEST_ADMIN_USERNAME,
    TEST_FULL_NAME,
    TEST_PASSWORD,
    TEST_SECRET_KEY,
    TEST_USERNAME,
)

# Force a throwaway SQLite DB when pytest runs; don't inherit from .env
_test_dir = tempfile.mkdtemp(prefix="pipeline_test_")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_test_dir, 'pipeline_test.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(_test_dir, "uploads")
os.environ.setdefault("SECRET_KEY", TEST_SECRET_KEY)
os.environ["ENFORCE_STAGE_GRAPH"] = "false"


@pytest.fixture(scope="session")
def _ensure_migrations() -> None:
    """Run migrations once per test session."""
    import subprocess
    import sys

    project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

    result = subprocess.run(
        [sys.executable, "-m", "alembic", "upgrade", "head"],
        cwd=project_root,
        capture_output=True,
        text=True,
        timeout=60,
        env=os.environ.copy(),
    )
    assert result.returncode == 0, f"alembic upgrade head failed: {result.stderr}"


@pytest.fixture
def db(_ensure_migrations: None) -> Session:
    """Database session for service tests. All tables are emptied after each test.

    Services commit, so tests cannot run inside an outer rolled-back transaction.
    """
    import app.models  # noqa: F401  registers every table on Base.metadata
    from app.db import Base, engine

    session = Session(bind=engine)
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        with engine.begin() as conn:
            for table in reversed(Base.metadata.sorted_tables):
                conn.execute(table.delete())


@pytest.fixture
def user(db: Session):
    """A persisted manager account used as the acting user."""
    from app.services.auth import create_user

    return create_user(db, TEST_USERNAME, TEST_PASSWORD, full_name=TEST_FULL_NAME)


@pytest.fixture
def blob_store(tmp_path):
    """Local blob store rooted in a per-test temp directory."""
    from app.storage.blob_store import LocalBlobStore

    return LocalBlobStore(tmp_path / "uploads")


@pytest.fixture
def client() -> TestClient:
    """FastAPI test client."""
    from app.main import app

    return TestClient(app)


@pytest.fixture
def admin_user(db: Session):
    """A persisted admin account."""
    from app.services.auth import create_user

    return create_user(db, TEST_ADMIN_USERNAME, TEST_PASSWORD, role="admin")


def _client_as(db: Session, acting_user, blob_store) -> TestClient:
    from app.api.deps import get_blob_store, require_auth
    from app.db.session import get_db
    from app.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[require_auth] = lambda: acting_user
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    return TestClient(app)


@pytest.fixture
def api_client(db: Session, user, blob_store) -> TestClient:
    """TestClient with the test db session, an authenticated manager and a temp blob store."""
    from app.main import app

    yield _client_as(db, user, blob_store)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_client(db: Session, admin_user, blob_store) -> TestClient:
    """Same as api_client, acting as an admin."""
    from app.main import app

    yield _client_as(db, admin_user, blob_store)
    app.dependency_overrides.clear()
