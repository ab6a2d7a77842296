# Pytest configuration for the API and storage tests.
# Each test gets its own in-memory mongomock database, Redis disabled, and a fixed JWT secret.
import os
import sys
from typing import Iterator

import mongomock
import pytest
from fastapi.testclient import TestClient

# Ensure the repo root is on sys.path so 'app' resolves when running pytest from anywhere
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from app.config import Settings  # noqa: E402
from app.main import create_app  # noqa: E402
from app.routes.auth import hash_password  # noqa: E402
from app.seed import bootstrap, ensure_schema  # noqa: E402
from app.storage import Storage  # noqa: E402

ADMIN_EMAIL = "admin@luxehomes.com"
ADMIN_PASSWORD = "admin123"


@pytest.fixture()
def settings() -> Settings:
    """Deterministic settings; nothing is read from the environment or a .env file."""
    return Settings(
        _env_file=None,
        MONGODB_DB="luxehomes_test",
        JWT_SECRET="test-secret",
        ADMIN_EMAIL=ADMIN_EMAIL,
        ADMIN_PASSWORD=ADMIN_PASSWORD,
        REDIS_ENABLED=False,
    )


@pytest.fixture()
def mongo_client() -> mongomock.MongoClient:
    return mongomock.MongoClient(tz_aware=True)


@pytest.fixture()
def storage(mongo_client, settings) -> Storage:
    """Bare storage with collections, indexes and counters but no seed data."""
    s = Storage(mongo_client[settings.MONGODB_DB])
    ensure_schema(s)
    return s


@pytest.fixture()
def seeded_storage(mongo_client, settings) -> Storage:
    """Storage after a full bootstrap: admin account plus the sample catalog."""
    s = Storage(mongo_client[settings.MONGODB_DB])
    bootstrap(s, settings, hash_password)
    return s


@pytest.fixture()
def client(settings, mongo_client) -> Iterator[TestClient]:
    """
    TestClient bound to a fresh app. Entering the context runs the lifespan,
    so the admin and sample properties exist before the first request.
    """
    app = create_app(settings=settings, mongo_client=mongo_client)
    with TestClient(app) as c:
        yield c
