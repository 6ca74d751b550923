"""Supabase client wrapper with async context manager support."""

import os
from typing import Any, Iterable, Optional
from supabase import create_client, Client
from supabase.client import ClientOptions
from src.utils.errors import SupabaseError
import logging

logger = logging.getLogger(__name__)

TASKS_TABLE = "tasks"
PROFILES_TABLE = "profiles"

TASK_COLUMNS = (
    "id, user_id, title, due_date, time, recurrence_type, recurrence_details, "
    "recurrence_time, is_completed, last_successful_completion_date, origin_board, "
    "completed_at, last_notified_at, last_moved_to_overdue_at"
)

# Global client instance (singleton pattern)
_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """Get or create Supabase client singleton."""
    global _client

    if _client is None:
        url = os.environ.get("SUPABASE_URL")
        key = os.environ.get("SUPABASE_SERVICE_ROLE_KEY")

        if not url or not key:
            raise SupabaseError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")

        # Service-role client: no user session to refresh or persist
        options = ClientOptions(
            auto_refresh_token=False,
            persist_session=False,
        )

        _client = create_client(url, key, options)
        logger.info("Supabase client initialized", extra={"url": url})

    return _client


class SupabaseClient:
    """Async context manager for Supabase client."""

    def __init__(self):
        self.client: Optional[Client] = None

    async def __aenter__(self) -> Client:
        self.client = get_supabase_client()
        return self.client

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            logger.error(
                "Supabase operation error",
                extra={"error": str(exc_val), "type": exc_type.__name__}
            )
        return False


# Tasks table operations
async def list_tasks(
    user_id: Optional[str] = None,
    boards: Optional[Iterable[str]] = None,
    is_completed: Optional[bool] = None,
    recurring_only: bool = False,
) -> list[dict]:
    """List task rows matching the given filter."""
    async with SupabaseClient() as client:
        try:
            query = client.table(TASKS_TABLE).select(TASK_COLUMNS)
            if user_id is not None:
                query = query.eq("user_id", user_id)
            if boards is not None:
                query = query.in_("origin_board", list(boards))
            if is_completed is not None:
                query = query.eq("is_completed", is_completed)
            if recurring_only:
                query = query.neq("recurrence_type", "none")
            result = query.execute()
            return result.data if result.data else []
        except Exception as e:
            raise SupabaseError(f"Failed to list tasks: {e}")


async def list_task_owners(recurring_only: bool = False) -> list[str]:
    """Distinct user IDs that own at least one task."""
    async with SupabaseClient() as client:
        try:
            query = client.table(TASKS_TABLE).select("user_id")
            if recurring_only:
                query = query.neq("recurrence_type", "none")
            result = query.execute()
        except Exception as e:
            raise SupabaseError(f"Failed to list task owners: {e}")

    rows = result.data if result.data else []
    return list(dict.fromkeys(row["user_id"] for row in rows if row.get("user_id")))


async def get_task(task_id: str) -> Optional[dict]:
    """Get a single task row by ID."""
    async with SupabaseClient() as client:
        try:
            result = client.table(TASKS_TABLE).select(TASK_COLUMNS).eq("id", task_id).execute()
            return result.data[0] if result.data and len(result.data) > 0 else None
        except Exception as e:
            raise SupabaseError(f"Failed to get task: {e}")


async def update_task(task_id: str, updates: dict[str, Any]) -> Optional[dict]:
    """Update fields of a single task row."""
    async with SupabaseClient() as client:
        try:
            result = client.table(TASKS_TABLE).update(updates).eq("id", task_id).execute()
            if result.data and len(result.data) > 0:
                return result.data[0]
            raise SupabaseError(f"Task not found: {task_id}")
        except SupabaseError:
            raise
        except Exception as e:
            raise SupabaseError(f"Failed to update task {task_id}: {e}")


# Profiles table operations
async def list_profiles() -> list[dict]:
    """List every user profile (id and timezone)."""
    async with SupabaseClient() as client:
        try:
            result = client.table(PROFILES_TABLE).select("id, timezone").execute()
            return result.data if result.data else []
        except Exception as e:
            raise SupabaseError(f"Failed to list profiles: {e}")


async def get_profile(user_id: str) -> Optional[dict]:
    """Get a user profile by user ID."""
    async with SupabaseClient() as client:
        try:
            result = client.table(PROFILES_TABLE).select("id, timezone").eq("id", user_id).execute()
            return result.data[0] if result.data and len(result.data) > 0 else None
        except Exception as e:
            raise SupabaseError(f"Failed to get profile: {e}")
