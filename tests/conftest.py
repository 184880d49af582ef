from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from src.api.deps import get_database
from src.api.main import app
from src.core.auth import create_access_token
from src.infrastructure.db.base import Base
from src.infrastructure.db.gateway import Database


@pytest.fixture()
async def database(tmp_path: Path) -> AsyncIterator[Database]:
    """A connected gateway over a fresh SQLite file with the full schema."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'enrollment.db'}")
    await db.connect()
    async with db.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield db
    await db.dispose()


@pytest.fixture()
async def async_client(database: Database) -> AsyncIterator[AsyncClient]:
    """HTTP client bound to the app with the test database injected."""
    app.dependency_overrides[get_database] = lambda: database
    transport = ASGITransport(app=app)  # type: ignore
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.pop(get_database, None)


@pytest.fixture()
def admin_token() -> str:
    """Generate admin JWT token for testing."""
    return create_access_token(0, roles=["admin"])


@pytest.fixture()
def user_token() -> str:
    """Generate a regular user's JWT token for testing."""
    return create_access_token(1, roles=["user"])
