"""
Shared pytest fixtures for kvjournal tests.

This module provides common fixtures including:
- Redis mocks for storage tests
- In-memory key-value stores for module tests
- A controllable clock and password digest helpers
- FastAPI test client wired to in-memory storage
"""

import fnmatch
import hashlib
import os
import sys
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from kvjournal.modules.storage import InMemoryKeyValueStore

TEST_SECRET = "test-secret-key-for-hs256-signatures"


def digest(password: str) -> str:
    """Hash a password the way the client does before sending it."""
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


class FakeClock:
    """Callable clock returning a settable time in seconds."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# =============================================================================
# Redis Mocking Infrastructure
# =============================================================================


@pytest.fixture
def mock_redis():
    """Create a mock async Redis client with canned responses."""
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock(return_value=True)
    redis.delete = AsyncMock(return_value=1)
    redis.ping = AsyncMock(return_value=True)
    return redis


@pytest.fixture
def mock_redis_with_data():
    """
    Redis mock with in-memory data storage for more realistic tests.

    This allows testing code that reads back what it writes.
    """
    storage = {}

    redis = AsyncMock()

    async def mock_set(key, value, *args, nx=False, **kwargs):
        if nx and key in storage:
            return None
        storage[key] = value
        return True

    async def mock_get(key):
        return storage.get(key)

    async def mock_delete(*keys):
        count = 0
        for key in keys:
            if key in storage:
                del storage[key]
                count += 1
        return count

    async def mock_scan_iter(match=None, count=None):
        for key in list(storage.keys()):
            if match is None or fnmatch.fnmatchcase(key, match):
                yield key

    async def mock_ping():
        return True

    redis.set = mock_set
    redis.get = mock_get
    redis.delete = mock_delete
    redis.scan_iter = mock_scan_iter
    redis.ping = mock_ping
    redis._storage = storage  # Expose for test assertions

    return redis


# =============================================================================
# Module Fixtures
# =============================================================================


@pytest.fixture
def memory_store():
    """Empty in-memory key-value store."""
    return InMemoryKeyValueStore()


@pytest.fixture
def clock():
    """Controllable clock for token expiry and entry timestamps."""
    return FakeClock()


# =============================================================================
# HTTP Fixtures
# =============================================================================


@pytest.fixture
def app_env(monkeypatch):
    """
    Configure the environment for an in-memory app and reset the config
    singleton so the next startup reads it.
    """
    from kvjournal.modules import config as config_module

    monkeypatch.setenv("STORAGE_BACKEND", "memory")
    monkeypatch.setenv("JWT_SECRET", TEST_SECRET)
    monkeypatch.delenv("TOKEN_TTL_HOURS", raising=False)
    monkeypatch.setattr(config_module, "_instance", None)
    return monkeypatch


@pytest.fixture
def client(app_env):
    """FastAPI test client running the real app on in-memory storage."""
    from kvjournal.main import app

    with TestClient(app) as test_client:
        yield test_client


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: Tests that exercise the full HTTP stack"
    )
