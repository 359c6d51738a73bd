"""
SnippetHub Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Service and API tests run against a real aiosqlite database file
       under `tmp_path` (fresh per test); unit tests of isolated logic use
       `mock_db_session`.

Fixture Hierarchy:
    Function-scoped:
    ├── mock_db_session: AsyncMock standing in for AsyncSession
    ├── database:        connected Database with all tables created
    ├── db_session:      session on `database`
    ├── make_snippet:    factory inserting a snippet through SnippetService
    └── test_client:     HTTPX AsyncClient bound to create_app(database)
"""

import os

# Must run before any `app` import reads settings.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["DB_AUTO_CREATE"] = "false"

from typing import List, Optional  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from app.database import Database  # noqa: E402
from app.schemas.snippet import SnippetCreate  # noqa: E402
from app.services.snippet_service import snippet_service  # noqa: E402


@pytest.fixture
def mock_db_session():
    """
    A MagicMock that simulates AsyncSession behavior.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = None
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def database(tmp_path):
    """A connected store backed by a throwaway SQLite file."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'snippets.db'}")
    db.connect()
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    async with database.session() as session:
        yield session


@pytest.fixture
def make_snippet(db_session):
    """
    Insert a snippet and return its SnippetResponse.

    Usage:
        snippet = await make_snippet("A", "x = 1", language="python", tags=["py"])
    """

    async def _make(
        title: str,
        content: str,
        language: str = "python",
        source: Optional[str] = None,
        tags: Optional[List[str]] = None,
    ):
        return await snippet_service.create_snippet(
            db_session,
            SnippetCreate(
                title=title, content=content, language=language, source=source, tags=tags or []
            ),
        )

    return _make


@pytest_asyncio.fixture
async def test_client(database):
    """
    HTTPX AsyncClient talking to an app bound to the test database.

    ASGITransport does not run the lifespan, so the handle is connected and
    initialized by the `database` fixture.
    """
    from app.main import create_app

    app = create_app(database=database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
