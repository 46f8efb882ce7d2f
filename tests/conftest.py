import atexit
import os
import shutil
import tempfile
from datetime import datetime
from pathlib import Path

import pytest

# Point the app at a throwaway database before anything imports settings
_tmp = Path(tempfile.mkdtemp(prefix="accomplo-tests-"))
atexit.register(shutil.rmtree, _tmp, ignore_errors=True)
os.environ["ACCOMPLO_DATABASE_URL"] = f"sqlite:///{_tmp / 'test.db'}"
os.environ["ACCOMPLO_BACKEND"] = "sql"
os.environ["ACCOMPLO_SECRET_KEY"] = "test-secret-key-0123456789abcdef-xyz"
os.environ["ACCOMPLO_LOG_LEVEL"] = "WARNING"
os.environ["ACCOMPLO_TIMEZONE"] = "UTC"

from accomplo.schemas import AccomplishmentOut  # noqa: E402


def make_acc(created_at: datetime, content: str = "shipped it", type: str = "small",
             profile_id: str = "p_1", id: str | None = None) -> AccomplishmentOut:
    return AccomplishmentOut(
        id=id or f"acc_{created_at.isoformat()}_{content}",
        content=content,
        type=type,
        category="work",
        month_year=created_at.isoformat()[:7],
        created_at=created_at,
        profile_id=profile_id,
    )


@pytest.fixture
def acc():
    """Factory for in-memory accomplishment records."""
    return make_acc


@pytest.fixture
def client():
    """TestClient on a freshly emptied SQL database."""
    from fastapi.testclient import TestClient

    from accomplo import models
    from accomplo.deps import engine
    from accomplo.main import app

    models.Base.metadata.drop_all(bind=engine)
    models.Base.metadata.create_all(bind=engine)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def signup(client):
    """Create an account and return bearer headers for it."""
    def _signup(email: str = "ada@example.com", password: str = "secret123", **extra) -> dict:
        r = client.post("/auth/signup", json={"email": email, "password": password, **extra})
        assert r.status_code == 200, r.text
        return {"Authorization": f"Bearer {r.json()['token']}"}
    return _signup
