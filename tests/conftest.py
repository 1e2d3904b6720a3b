from contextlib import AsyncExitStack

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from socialfeed import models  # noqa: F401
from socialfeed.database import Base, get_db
from socialfeed.main import app
from socialfeed.services.user import UserService


@pytest.fixture()
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture()
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture()
def make_user(db):
    """Create a user directly through the identity store."""
    users = UserService(db)

    async def _make_user(username: str, **fields):
        return await users.create_user(username=username, **fields)

    return _make_user


@pytest.fixture()
async def make_client(session_maker):
    """Factory for HTTP clients; each one keeps its own session cookie."""

    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncExitStack() as stack:

        async def _make_client() -> AsyncClient:
            client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
            return await stack.enter_async_context(client)

        yield _make_client
    app.dependency_overrides.clear()


@pytest.fixture()
async def client(make_client):
    return await make_client()


@pytest.fixture()
def signup(make_client):
    """Sign a user up on a fresh client and return (client, user json)."""

    async def _signup(username: str, **fields):
        client = await make_client()
        res = await client.post("/api/auth/signup", json={"username": username, **fields})
        assert res.status_code == 201, res.text
        return client, res.json()

    return _signup
