"""
Scrol Backend — Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment is pointed at SQLite and a temporary blob root before any
       scrol module is imported (settings and singletons read it at import).

Fixture Hierarchy:
    Function-scoped:
    ├── mock_db_session:  AsyncMock session (service unit tests)
    ├── db_engine:        async engine on a fresh file-backed SQLite DB
    ├── db_session:       real AsyncSession on db_engine
    ├── seed_candidates:  three candidates inserted into db_session
    ├── temp_storage:     temporary blob root directory
    ├── sample_image_bytes
    ├── test_client:      httpx AsyncClient over ASGITransport, mock session
    └── live_client:      same client, real get_db_session bound to db_engine
"""

import os
import tempfile
from unittest.mock import AsyncMock, MagicMock, patch

# Must run before any scrol import
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.mkdtemp(prefix="scrol_db_"), "test.db"
)
os.environ["BLOB_ROOT"] = tempfile.mkdtemp(prefix="scrol_test_")
os.environ["NOTIFY_URL"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from scrol.database import Base
from scrol.models import Candidate


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    A mock AsyncSession.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = candidate
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """An engine on an empty SQLite database with all tables created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'scrol.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """
    A real session on db_engine.

    Used by tests that exercise the actual SQL (union pagination, updates).
    """
    factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def seed_candidates(db_session):
    """Alice, Bob and Carol; returns them as a dict keyed by first name."""
    people = {
        "alice": Candidate(email="alice@example.com", name="Alice Tan", company="Acme"),
        "bob": Candidate(email="bob@example.com", name="Bob Lim", company="Globex"),
        "carol": Candidate(email="carol@example.com", name="Carol Ng", photo="profile-carol"),
    }
    db_session.add_all(list(people.values()))
    await db_session.commit()
    return people


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "photos"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def sample_image_bytes():
    """Smallest valid JPEG: SOI + JFIF header + EOI."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest_asyncio.fixture
async def test_client():
    """
    An httpx AsyncClient wired to the FastAPI app.

    get_db_session is overridden with a mock session so endpoint tests never
    reach a database; tests patch the service singletons in the route modules.
    raise_app_exceptions=False lets 500 responses come back as responses.
    """
    from scrol.database import get_db_session
    from scrol.main import app

    async def override_session():
        session = AsyncMock()
        session.add = MagicMock()
        yield session

    app.dependency_overrides[get_db_session] = override_session
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def live_client(db_engine):
    """
    An httpx AsyncClient wired to the FastAPI app with real per-request sessions.

    The session factory behind get_db_session is pointed at db_engine, so
    requests commit and roll back through the production dependency. Tests
    that need a failing commit patch scrol.database.async_session_factory
    again inside the test.
    """
    from scrol.main import app

    factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    with patch("scrol.database.async_session_factory", factory):
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
