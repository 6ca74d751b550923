"""Test helper functions."""

import os
from datetime import datetime, timezone
from typing import Dict, Any, Optional


def at(year: int, month: int, day: int, hour: int = 12, minute: int = 0, tz=timezone.utc) -> datetime:
    """Aware datetime shortcut."""
    return datetime(year, month, day, hour, minute, tzinfo=tz)


def create_cron_request(
    path: str = "/api/cron/daily_reset",
    token: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """Create a Vercel cron request object for testing."""
    if headers is None:
        secret = token if token is not None else os.environ.get("CRON_SECRET", "")
        headers = {
            "authorization": f"Bearer {secret}",
            "user-agent": "vercel-cron/1.0",
        }

    return {
        "method": "GET",
        "path": path,
        "headers": headers,
        "body": "",
        "query": {}
    }
