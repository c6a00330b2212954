import os
import tempfile
from pathlib import Path

import pytest

# Configure the application before it is imported
_tmp_dir = tempfile.mkdtemp(prefix="clinic-tests-")
os.environ["TESTING"] = "1"
os.environ["JWT_SECRET"] = "test-secret-key"
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_tmp_dir) / 'test.db'}"
os.environ["RATE_LIMIT_PER_HOUR"] = "50"

from fastapi.testclient import TestClient  # noqa: E402

from clinic.core.database import Base, get_engine, get_redis, init_db  # noqa: E402
from clinic.main import app  # noqa: E402


class RedisStub:
    """Dict-backed stand-in for the few redis commands the rate limiter uses."""

    def __init__(self):
        self.data = {}

    def get(self, key):
        return self.data.get(key)

    def setex(self, key, ttl, value):
        self.data[key] = str(value)
        return True

    def incr(self, key):
        self.data[key] = str(int(self.data.get(key, 0)) + 1)
        return int(self.data[key])


@pytest.fixture
def redis_stub():
    stub = RedisStub()
    app.dependency_overrides[get_redis] = lambda: stub
    yield stub
    app.dependency_overrides.pop(get_redis, None)


@pytest.fixture(scope="function")
def test_db():
    engine = get_engine()
    init_db(engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(test_db, redis_stub):
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client


