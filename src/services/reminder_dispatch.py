"""Reminder dispatch - hand a task reminder to the notification edge function.

Push delivery and pruning of expired subscriptions happen inside the edge
function; this side only asks it to send one reminder for one task.
"""

from src.models.board_pass import DispatchResult
from src.services.supabase_client import SupabaseClient
from src.utils.errors import ReminderDispatchError
from src.utils.settings import SchedulerConfig
from src.utils.logging import get_structured_logger, mask_user_id

logger = get_structured_logger(__name__)


async def invoke_reminder_function(user_id: str, task_id: str) -> None:
    """Invoke the reminder function, raising ReminderDispatchError on failure."""
    function_name = SchedulerConfig.reminder_function_name()
    async with SupabaseClient() as client:
        try:
            client.functions.invoke(
                function_name,
                invoke_options={"body": {"taskId": task_id, "userId": user_id}},
            )
        except Exception as e:
            raise ReminderDispatchError(f"{function_name} failed for task {task_id}: {e}")


async def send_reminder(user_id: str, task_id: str) -> DispatchResult:
    """Send one reminder; failures are reported in the result, never raised."""
    try:
        await invoke_reminder_function(user_id, task_id)
    except Exception as e:
        logger.error(
            "Reminder dispatch failed",
            user_id=mask_user_id(user_id),
            task_id=task_id,
            error=str(e),
        )
        return DispatchResult(ok=False, error=str(e))

    logger.info(
        "Reminder dispatched",
        user_id=mask_user_id(user_id),
        task_id=task_id,
    )
    return DispatchResult(ok=True)
