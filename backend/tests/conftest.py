from collections.abc import AsyncIterator, Iterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from diyapi import errs
from diyapi.config import Settings
from diyapi.db.session import Base
from diyapi.dependencies import get_settings
from diyapi.main import app
from tests.factories import ADMIN_KEY, USER_KEY

# Fixtures defined outside conftest.py are only visible when registered here.
pytest_plugins = ["tests.seeds"]

# Separate Postgres database for integration tests
TEST_DATABASE_URL = "postgresql+asyncpg://diyapi@localhost:5432/diyapi_test"

engine = create_async_engine(TEST_DATABASE_URL, poolclass=NullPool)
async_session = async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db() -> AsyncIterator[AsyncSession]:
    """Create tables and yield a session, then drop tables after test.

    Skips the test when the test database is not reachable.
    """
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except (OSError, SQLAlchemyError) as exc:
        pytest.skip(f"test database unavailable: {exc}")

    async with async_session() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def test_settings() -> Iterator[Settings]:
    """Settings with known API keys, injected through the get_settings dependency."""
    settings = Settings(auth_realm="diyapi-test", api_keys=[USER_KEY], admin_api_keys=[ADMIN_KEY])
    app.dependency_overrides[get_settings] = lambda: settings
    yield settings
    app.dependency_overrides.pop(get_settings, None)


@pytest_asyncio.fixture
async def client(test_settings: Settings) -> AsyncIterator[AsyncClient]:
    """HTTP client for the app; the trace mode is reset after each test."""
    trace_mode = app.state.trace_mode
    app.state.trace_mode = errs.TraceMode.OP_STACK

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.state.trace_mode = trace_mode
    app.dependency_overrides.clear()
