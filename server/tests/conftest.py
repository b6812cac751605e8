"""Shared pytest fixtures for server tests."""

from __future__ import annotations

import os
import tempfile
import uuid

# Point the app at a throwaway database before app.config is imported
_DB_DIR = tempfile.mkdtemp(prefix="salesdojo-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/test.db"
os.environ["GEMINI_API_KEY"] = ""
os.environ["DEFAULT_COACH_MODE"] = "mock"
os.environ["DEBUG"] = "false"

import pytest
from fastapi.testclient import TestClient

from app.main import app


@pytest.fixture(scope="session")
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def user_headers() -> dict[str, str]:
    """A fresh user per test keeps rows from leaking between tests."""
    return {"X-User-Id": f"user-{uuid.uuid4()}"}
