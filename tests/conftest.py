"""Shared pytest fixtures and configuration."""

import os
import pytest
from unittest.mock import Mock, MagicMock
from datetime import timezone
from zoneinfo import ZoneInfo
from freezegun import freeze_time

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-key")
os.environ.setdefault("CRON_SECRET", "test-cron-secret")
os.environ.setdefault("DEFAULT_TIMEZONE", "America/Sao_Paulo")

from tests.utils.fakes import InMemoryTaskRepository, RecordingDispatcher


@pytest.fixture
def sao_paulo():
    """Default user zone (UTC-3, no DST)."""
    return ZoneInfo("America/Sao_Paulo")


@pytest.fixture
def utc():
    return timezone.utc


@pytest.fixture
def mock_supabase_client():
    """Mock Supabase client with a chainable query builder."""
    client = Mock()
    query = MagicMock()
    for method in ("select", "eq", "neq", "in_", "update", "insert"):
        getattr(query, method).return_value = query
    query.execute.return_value = MagicMock(data=[])
    client.table = Mock(return_value=query)
    client.query = query
    return client


@pytest.fixture
def repository():
    """Empty in-memory task repository."""
    return InMemoryTaskRepository()


@pytest.fixture
def dispatcher():
    """Reminder dispatcher that records calls and succeeds."""
    return RecordingDispatcher()


@pytest.fixture
def freeze_time_fixture():
    """Freeze the clock at 2025-03-11 09:00 in Sao Paulo (12:00 UTC)."""
    with freeze_time("2025-03-11 12:00:00") as frozen_time:
        yield frozen_time


@pytest.fixture
def mock_vercel_request():
    """Mock Vercel cron request carrying the cron bearer token."""
    return {
        "method": "GET",
        "path": "/api/cron/daily_reset",
        "headers": {
            "authorization": f"Bearer {os.environ['CRON_SECRET']}",
            "user-agent": "vercel-cron/1.0",
        },
        "body": "",
        "query": {}
    }


@pytest.fixture(scope="function")
def reset_environment():
    """Restore environment variables after each test."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)

