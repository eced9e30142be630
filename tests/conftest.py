import os
from collections.abc import AsyncIterator
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool, StaticPool

from records.config import RepositoryBackend
from records.db.session import Base, get_db
from records.dependencies import get_repository_backend
from records.main import app

# Pytest only picks up fixtures from conftest.py files. Fixtures defined in other
# modules (like tests/seeds.py) are invisible unless we register them here.
# A plain `import tests.seeds` won't work; pytest_plugins is the way to do it.
pytest_plugins = ["tests.seeds"]

# In-memory SQLite by default, a fresh database per test. Point TEST_DATABASE_URL at
# Postgres (e.g. postgresql+asyncpg://records@localhost:5432/records_test) to run
# the same suite with real row locks.
TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite://")


def _engine_options(url: str) -> dict[str, Any]:
    # One shared connection, otherwise every checkout would see a new empty database
    if url.startswith("sqlite"):
        return {"poolclass": StaticPool}
    return {"poolclass": NullPool}


@pytest_asyncio.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """Create tables on a fresh engine, drop them after the test."""
    engine = create_async_engine(TEST_DATABASE_URL, **_engine_options(TEST_DATABASE_URL))
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    async with async_sessionmaker(engine, expire_on_commit=False)() as session:
        yield session


@pytest.fixture(params=list(RepositoryBackend), ids=lambda backend: backend.value)
def backend(request: pytest.FixtureRequest) -> RepositoryBackend:
    """Every test that asks for this runs once per repository backend."""
    return request.param  # type: ignore[no-any-return]


@pytest_asyncio.fixture
async def client(db: AsyncSession, backend: RepositoryBackend) -> AsyncIterator[AsyncClient]:
    """HTTP client that uses the test database session and the given backend.

    Mirrors get_db: commit when the request succeeds, roll back when it raises.
    """

    async def override_get_db() -> AsyncIterator[AsyncSession]:
        try:
            yield db
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_repository_backend] = lambda: backend

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()
