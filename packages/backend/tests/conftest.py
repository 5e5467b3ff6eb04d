"""Test fixtures — a fresh SQLite database and app instance per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets its own Settings pointing at a SQLite file under
   tmp_path (aiosqlite driver), so tests never share rows.
2. create_app(settings) builds the engine, session factory and token
   codec exactly as production does; the schema is created from the models.
3. The HTTP client talks to the app in-process through httpx's
   ASGITransport — no server, no real network.

Nothing here overrides authentication: every protected call in these
tests goes through the real token + principal pipeline.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from tasktracker.config import Settings
from tasktracker.db.models import Base
from tasktracker.main import create_app

TEST_SECRET = "test-secret-for-the-tracker-suite-0123456789"
DEFAULT_PASSWORD = "secret123"


@pytest.fixture()
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'tracker.db'}",
        jwt_secret=TEST_SECRET,
        environment="development",
    )


@pytest_asyncio.fixture()
async def app(settings):
    application = create_app(settings)
    async with application.state.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield application
    finally:
        await application.state.engine.dispose()


@pytest_asyncio.fixture()
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture()
async def db_session(app):
    """Direct session on the test database, for setup and assertions."""
    async with app.state.session_factory() as session:
        yield session


@pytest.fixture()
def token_codec(app):
    return app.state.token_codec


@pytest.fixture()
def login_as(client):
    """Register (if needed) and log in; returns Authorization headers."""

    async def _login(username: str, password: str = DEFAULT_PASSWORD) -> dict:
        r = await client.post(
            "/api/register", json={"username": username, "password": password}
        )
        assert r.status_code in (200, 409), r.text
        r = await client.post(
            "/api/login", json={"username": username, "password": password}
        )
        assert r.status_code == 200, r.text
        return {"Authorization": f"Bearer {r.json()['data']['token']}"}

    return _login


@pytest_asyncio.fixture()
async def alice(login_as):
    return await login_as("alice", "secret1")


@pytest_asyncio.fixture()
async def bob(login_as):
    return await login_as("bob", "secret2")
