"""
API Faker — Test Configuration (conftest.py)
==============================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Every test gets a fresh in-memory store seeded with the same document,
       so tests never touch a real db.json and never leak state.

Fixture Hierarchy (all function-scoped):
    ├── seed_data:         The document every store starts from
    ├── database:          In-memory Database over a copy of seed_data
    ├── make_settings:     Settings factory that ignores .env and the environment file
    ├── mock_database:     MagicMock store (sync reads, AsyncMock writes)
    ├── client:            HTTPX AsyncClient against a writable app
    └── read_only_client:  HTTPX AsyncClient against a read-only app
"""

import os
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Keep tests off the default db.json and quiet, BEFORE any app imports
os.environ["DB_FILE"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

from apifaker.config import Settings  # noqa: E402
from apifaker.database import Database  # noqa: E402
from apifaker.main import create_app  # noqa: E402


@pytest.fixture
def seed_data():
    """
    A small store covering every resource kind.

    posts:     collection with integer ids
    comments:  collection with string ids
    settings:  singular object
    count:     singular scalar
    """
    return {
        "posts": [
            {"id": 1, "title": "json-server", "author": "typicode"},
            {"id": 2, "title": "second post", "author": "someone"},
        ],
        "comments": [
            {"id": "c1", "body": "nice post", "postId": 1},
        ],
        "settings": {"theme": "light", "lang": "en"},
        "count": 5,
    }


@pytest.fixture
def database(seed_data):
    return Database(data=seed_data)


@pytest.fixture
def make_settings():
    """Build Settings from explicit values only."""
    def _make(**overrides):
        values = {"db_file": "", "log_level": "WARNING"}
        values.update(overrides)
        return Settings(_env_file=None, **values)
    return _make


@pytest.fixture
def mock_database():
    """
    Provides a mock store for service-level tests.

    Reads are plain MagicMocks (the real ones are synchronous); writes are
    AsyncMocks. Tests set has/get_collection to steer classification.
    """
    db = MagicMock()
    db.id_field = "id"
    db.create = AsyncMock()
    db.update = AsyncMock()
    db.patch = AsyncMock()
    db.update_singular = AsyncMock()
    db.delete = AsyncMock()
    return db


def _client_for(app):
    transport = ASGITransport(app=app)
    return AsyncClient(transport=transport, base_url="http://test")


@pytest_asyncio.fixture
async def client(database, make_settings):
    """
    Provides an async HTTP client for endpoint testing.

    The lifespan is not run by ASGITransport; the in-memory store needs no init().
    """
    app = create_app(config=make_settings(), database=database)
    async with _client_for(app) as http:
        yield http


@pytest_asyncio.fixture
async def read_only_client(database, make_settings):
    app = create_app(config=make_settings(read_only=True), database=database)
    async with _client_for(app) as http:
        yield http
