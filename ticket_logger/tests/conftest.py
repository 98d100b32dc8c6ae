"""
Centralized Test Configuration.
"""

import tempfile
from pathlib import Path

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import NullPool

from ticket_logger.app.core.config import Settings
from ticket_logger.app.db.session import get_db, Base
from ticket_logger.app.main import create_app

# Setup file-backed SQLite so concurrent requests get their own connections
TEST_DIR = Path(tempfile.mkdtemp(prefix="ticket_logger_tests_"))
TEST_DATABASE_URL = f"sqlite+aiosqlite:///{TEST_DIR / 'tickets.db'}"

engine = create_async_engine(TEST_DATABASE_URL, poolclass=NullPool)

TestingSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


def make_settings(**overrides) -> Settings:
    """Settings isolated from the environment and any local `.env` file."""
    values = {
        "environment": "development",
        "database_url": TEST_DATABASE_URL,
        "static_dir": str(TEST_DIR / "no-frontend-bundle"),
        "rate_limit_max": 10_000,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


async def override_get_db():
    async with TestingSessionLocal() as session:
        yield session


def build_test_app(**overrides):
    test_app = create_app(make_settings(**overrides))
    test_app.dependency_overrides[get_db] = override_get_db
    return test_app


app = build_test_app()


@pytest.fixture(autouse=True)
async def setup_database():
    """Create tables before each test function and drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# Shared session for fixture data creation
@pytest.fixture
async def db_session():
    async with TestingSessionLocal() as session:
        yield session


@pytest.fixture
def ticket_payload():
    """Factory for a valid create-ticket body; keyword overrides replace fields."""
    def _payload(**overrides):
        payload = {
            "tripId": "TRIP-1001",
            "tripDate": "2024-01-15",
            "driverId": 42,
            "reason": "Driver Late",
            "city": "Cairo",
            "serviceType": "Economy",
            "customerPhone": "+20 100 123 4567",
            "agentName": "Mona",
        }
        payload.update(overrides)
        return payload
    return _payload


class MockRedis:
    """In-memory stand-in for the async Redis commands the rate limiter uses."""

    def __init__(self):
        self.store = {}
        self.ttls = {}
        self.fail = False

    def _check(self):
        if self.fail:
            from redis.exceptions import ConnectionError
            raise ConnectionError("Redis unavailable")

    async def incr(self, key):
        self._check()
        self.store[key] = int(self.store.get(key, 0)) + 1
        return self.store[key]

    async def expire(self, key, seconds):
        self._check()
        if key not in self.store:
            return False
        self.ttls[key] = seconds
        return True

    async def ttl(self, key):
        self._check()
        if key not in self.store:
            return -2
        return self.ttls.get(key, -1)

    async def ping(self):
        return not self.fail

    async def aclose(self):
        self.store = {}
        self.ttls = {}


@pytest.fixture
def mock_redis():
    return MockRedis()
