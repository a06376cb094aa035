import os

# Must be set before the app (and its settings) are imported
os.environ["ENVIRONMENT"] = "testing"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["CACHE_ENABLED"] = "true"

import pytest
from typing import AsyncGenerator
from fakeredis import FakeServer
from fakeredis.aioredis import FakeRedis
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.db.session import get_db
from app.models import Base
from app.models.user import User
from app.schemas.user_schema import UserCreate
from app.services import redis_service
from app.services.auth_service import AuthService

# Test database URL - in-memory SQLite
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_PASSWORD = "Password123!"

@pytest.fixture
async def test_engine():
    """Fresh in-memory database per test"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()

@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

@pytest.fixture
async def test_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session for arranging data and calling services directly"""
    async with session_factory() as session:
        yield session

@pytest.fixture(autouse=True)
def fake_redis():
    """Every test gets its own empty in-process Redis"""
    client = FakeRedis(server=FakeServer(), decode_responses=True)
    redis_service.set_redis_client(client)

    yield client

    redis_service.set_redis_client(None)

@pytest.fixture
async def test_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the test database"""
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()

@pytest.fixture
def make_user(test_db: AsyncSession):
    """Factory creating users directly through the auth service"""
    async def _make_user(username: str, is_admin: bool = False, **fields) -> User:
        auth_service = AuthService(test_db)
        user_data = UserCreate(username=username, password=TEST_PASSWORD, **fields)
        return await auth_service.create_user(user_data, is_admin=is_admin)

    return _make_user

@pytest.fixture
def auth_headers(test_db: AsyncSession):
    """Bearer headers for a user, without going through /login"""
    def _auth_headers(user: User) -> dict:
        token = AuthService(test_db).create_token_for_user(user)
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers

@pytest.fixture
async def alice(make_user) -> User:
    return await make_user("alice", nickname="Alice")

@pytest.fixture
async def bob(make_user) -> User:
    return await make_user("bob", nickname="Bob")

@pytest.fixture
async def carol(make_user) -> User:
    return await make_user("carol")

@pytest.fixture
async def admin(make_user) -> User:
    return await make_user("support", is_admin=True)
