"""
Shared fixtures.

The environment is set before any todo_api import because todo_api.db
builds its engine from the settings at import time.
"""
import os

os.environ["ENVIRONMENT"] = "testing"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

from datetime import timedelta, timezone
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

from todo_api.db import build_session_factory, create_schema, get_db
from todo_api.main import app
from todo_api.service import TaskItemService

# Fixed offset used as "local time" by service tests
LOCAL_TZ = timezone(timedelta(hours=2))


@pytest_asyncio.fixture
async def engine(tmp_path: Path):
    """A fresh SQLite database file per test"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'tasks.sqlite3'}")
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine):
    factory = build_session_factory(engine)
    async with factory() as session:
        yield session


@pytest.fixture
def service(session) -> TaskItemService:
    return TaskItemService(session, tz=LOCAL_TZ)


@pytest_asyncio.fixture
async def client(engine):
    """HTTP client against the app with the test database injected"""
    factory = build_session_factory(engine)

    async def override_get_db():
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
