"""Repository the schedulers use to read and write tasks."""

from typing import Any, Iterable, Optional

from src.services import supabase_client, user_timezones


class TaskRepository:
    """Persistence collaborator backed by the Supabase helper functions.

    Each call is atomic per row; there is no multi-task transaction.
    """

    async def list_profiles(self) -> list[dict]:
        return await supabase_client.list_profiles()

    async def list_task_owners(self, recurring_only: bool = False) -> list[str]:
        return await supabase_client.list_task_owners(recurring_only=recurring_only)

    async def get_user_timezone(self, user_id: str) -> str:
        return await user_timezones.get_user_timezone(user_id)

    async def list_tasks(
        self,
        user_id: Optional[str] = None,
        boards: Optional[Iterable[str]] = None,
        is_completed: Optional[bool] = None,
        recurring_only: bool = False,
    ) -> list[dict]:
        return await supabase_client.list_tasks(
            user_id=user_id,
            boards=boards,
            is_completed=is_completed,
            recurring_only=recurring_only,
        )

    async def get_task(self, task_id: str) -> Optional[dict]:
        return await supabase_client.get_task(task_id)

    async def update_task(self, task_id: str, updates: dict[str, Any]) -> None:
        await supabase_client.update_task(task_id, updates)
