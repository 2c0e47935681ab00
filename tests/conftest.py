"""Shared pytest fixtures backed by an in-memory MongoDB."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List

import mongomock
import pytest

# Ensure the application package is importable during tests.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from applydesk.config import Settings  # noqa: E402
from applydesk.database import create_indexes  # noqa: E402
from applydesk.models import Session  # noqa: E402
from applydesk.services import Backend  # noqa: E402

TEST_DB_NAME = "test_applydesk"
PASSWORD = "correct-horse"


@pytest.fixture(autouse=True)
def mongo_db():
    """Provide an isolated in-memory MongoDB database for each test."""
    client = mongomock.MongoClient()
    db = client[TEST_DB_NAME]
    create_indexes(db)

    yield db

    client.drop_database(TEST_DB_NAME)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        mongodb_database=TEST_DB_NAME,
        public_storage_url="http://localhost/storage",
        password_reset_redirect="http://localhost/update-password",
    )


@pytest.fixture
def backend(mongo_db, settings) -> Backend:
    return Backend.from_database(mongo_db, settings)


@pytest.fixture
def other_backend(mongo_db, settings) -> Backend:
    """A second client handle on the same database, e.g. another user's browser."""
    return Backend.from_database(mongo_db, settings)


async def _register_and_sign_in(backend: Backend, email: str, password: str = PASSWORD) -> Session:
    await backend.auth.sign_up(email, password)
    return await backend.auth.sign_in(email, password)


@pytest.fixture
def sign_up_and_in():
    """Coroutine helper: register ``email`` on ``backend`` and open a session."""
    return _register_and_sign_in


@pytest.fixture
def document_calls(backend, monkeypatch) -> List[str]:
    """Record every document-store call made through ``backend``."""
    calls: List[str] = []
    documents = backend.documents
    for name in ("select", "insert", "update", "upsert", "delete"):
        original = getattr(documents, name)

        async def spy(*args, _name=name, _original=original, **kwargs):
            calls.append(_name)
            return await _original(*args, **kwargs)

        monkeypatch.setattr(documents, name, spy)
    return calls
