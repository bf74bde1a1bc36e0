import os

# Must be set before the app (and its settings) are imported
os.environ.setdefault("AI_MODE", "mock")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")

import fakeredis
import fakeredis.aioredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tablewise.main import app
from tablewise.db import Base, get_db
from tablewise.deps import get_local_store
from tablewise.infra import redis_client
from tablewise.infra.local_store import MemoryStore
from tablewise.infra.rate_limit import limiter
from tablewise.models import Recipe, utcnow

# --- Test Database Setup ---

SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,  # one shared connection, so every session sees the same in-memory DB
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def disable_rate_limits():
    limiter.enabled = False
    yield
    limiter.enabled = True


@pytest.fixture(autouse=True)
def mock_redis():
    server = fakeredis.FakeServer()
    # Create fake clients sharing the same server
    async_redis = fakeredis.aioredis.FakeRedis(server=server, decode_responses=True)
    sync_redis = fakeredis.FakeRedis(server=server, decode_responses=True)

    # Force the clients into the infra module
    redis_client._redis_async = async_redis
    redis_client._redis_sync = sync_redis

    yield sync_redis

    redis_client._redis_async = None
    redis_client._redis_sync = None


@pytest.fixture
def client():
    """Test client with DB override. Planner state goes to fakeredis through RedisStore."""
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def memory_client():
    """Test client whose planner state lives in a MemoryStore."""
    store = MemoryStore()
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_local_store] = lambda: store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def db_session():
    """Direct database session for setup."""
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def make_recipe(db_session):
    """Insert a recipe straight into the database."""
    def _make(title="Test Recipe", ingredients=None, steps=None, **fields):
        now = utcnow()
        recipe = Recipe(
            title=title,
            ingredients=ingredients or [],
            steps=steps or [],
            created_at=fields.pop("created_at", now),
            updated_at=fields.pop("updated_at", now),
            **fields,
        )
        db_session.add(recipe)
        db_session.commit()
        db_session.refresh(recipe)
        return recipe
    return _make
