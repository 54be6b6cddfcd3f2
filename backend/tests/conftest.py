# tests/conftest.py
"""Shared fixtures: in-memory SQLite database and an ASGI test client."""

import os

# Settings are read at import time, so configure before importing maven
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SEED_DEMO_DATA"] = "false"
os.environ["SYNC_DELAY_SECONDS"] = "0"
os.environ.pop("OPENAI_API_KEY", None)
os.environ.pop("OPENAI_KEY", None)

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from maven.database import Base, engine, AsyncSessionLocal
from maven.services.storage import Storage
import maven.models  # noqa: F401


@pytest_asyncio.fixture
async def database():
    """Fresh schema per test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
def storage(db_session):
    return Storage(db_session)


@pytest_asyncio.fixture
async def client(database):
    from maven.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def prospect_data():
    """Minimal valid prospect columns."""
    return {
        "first_name": "Sarah",
        "last_name": "Johnson",
        "email": "sarah.johnson@techcorp.com",
        "company": "TechCorp Solutions",
        "title": "VP of Marketing",
        "industry": "Technology",
        "company_size": "1000+",
        "revenue": "$100M+",
        "source": "apollo",
        "lead_score": 92,
    }
