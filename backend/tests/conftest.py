from pathlib import Path
import os
import tempfile

import pytest

# Configure the app before it is imported by any test module.
_TMP = Path(tempfile.mkdtemp(prefix="study_planner_tests_"))
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP / 'test.db'}"
os.environ["JWT_SECRET"] = "test-secret-for-the-study-planner-suite"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["DB_RETRY_DELAY_SECONDS"] = "0"
os.environ["FRONTEND_URL"] = "http://localhost:3000"
os.environ["ALLOWED_ORIGINS"] = "http://app.example.com"

from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, SQLModel  # noqa: E402

from study_planner.database import engine, supervisor  # noqa: E402
from study_planner.main import app  # noqa: E402


def _reset_tables():
    from study_planner import models  # noqa: F401

    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)


@pytest.fixture
def client():
    """A TestClient with startup run and a fresh database."""
    with TestClient(app) as c:
        assert supervisor.wait(5)
        _reset_tables()
        yield c


@pytest.fixture
def session():
    """A database session on freshly created tables (no HTTP layer)."""
    _reset_tables()
    with Session(engine) as s:
        yield s


@pytest.fixture
def register(client):
    """Register a user and return `(response_json, auth_headers)`."""
    def _register(name="A", email="a@x.com", password="pw123456"):
        r = client.post('/api/register', json={'name': name, 'email': email, 'password': password})
        assert r.status_code == 201, r.text
        body = r.json()
        return body, {'Authorization': f"Bearer {body['token']}"}
    return _register
