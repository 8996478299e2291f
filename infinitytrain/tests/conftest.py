"""
Shared fixtures: a throwaway SQLite database per test, the app wired to it,
and an httpx client talking to the app in-process.
"""
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from infinitytrain.config import settings
from infinitytrain.database import build_engine, build_session_factory, create_tables, get_db
from infinitytrain.main import app
from infinitytrain.orm.user import User, UserRole
from infinitytrain.rate_limit import limiter

limiter.enabled = False


@pytest_asyncio.fixture
async def engine(tmp_path):
    # A file, not :memory:, so every pooled connection sees the same tables
    test_engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await create_tables(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return build_session_factory(engine)


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    target = tmp_path / "uploads"
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(target))
    return target


@pytest_asyncio.fixture
async def client(session_factory, upload_dir) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client
    app.dependency_overrides.pop(get_db, None)


@pytest_asyncio.fixture
async def admin(db) -> User:
    user = User(
        id="u1",
        name="Admin",
        email="admin@oceaninfinity.com",
        role=UserRole.admin,
        avatar="https://example.com/admin.svg"
    )
    db.add(user)
    await db.commit()
    return user


@pytest_asyncio.fixture
async def employee(db) -> User:
    user = User(
        id="u2",
        name="May",
        email="may@oceaninfinity.com",
        role=UserRole.employee,
        avatar="https://example.com/may.svg"
    )
    db.add(user)
    await db.commit()
    return user
