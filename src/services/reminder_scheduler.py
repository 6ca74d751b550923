"""Reminder scheduler - the per-minute pass that fires recurring task reminders."""

from datetime import datetime, time, tzinfo
from typing import Awaitable, Callable, Optional

from src.models.board_pass import DispatchResult, ReminderPassSummary
from src.models.task import Task
from src.services.board_scheduler import load_profile_zones, owner_timezone, parse_task_rows
from src.services.completion import is_completed_for_cycle_on
from src.services.recurrence import describe_recurrence, is_due_on
from src.services.reminder_dispatch import send_reminder
from src.services.task_repository import TaskRepository
from src.utils.dates import (
    as_aware_utc,
    is_same_minute,
    local_date,
    scheduled_instant,
    to_local,
    utc_now,
)
from src.utils.logging import (
    get_structured_logger,
    log_timing,
    correlation_context,
    mask_user_id,
    sanitize_task_title,
)

logger = get_structured_logger(__name__)

Dispatcher = Callable[[str, str], Awaitable[DispatchResult]]


def parse_time_of_day(value: Optional[str]) -> Optional[time]:
    """Parse ``HH:mm`` (or Postgres ``HH:mm:ss``) into a time; None when malformed."""
    if not value:
        return None
    parts = str(value).strip().split(":")
    if len(parts) < 2:
        return None
    try:
        hour = int(parts[0])
        minute = int(parts[1])
    except ValueError:
        return None
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        return None
    return time(hour, minute)


def should_send_reminder(task: Task, local_now: datetime) -> bool:
    """Whether the reminder for ``task`` is due in the minute ``local_now`` falls in.

    ``local_now`` must carry the task owner's timezone.
    """
    if not task.is_recurring:
        return False

    time_of_day = parse_time_of_day(task.reminder_time)
    if time_of_day is None:
        return False

    today = local_now.date()
    if not is_due_on(task, today) or is_completed_for_cycle_on(task, today):
        return False

    if not is_same_minute(local_now, scheduled_instant(today, time_of_day, local_now.tzinfo)):
        return False

    return local_date(task.last_notified_at, local_now.tzinfo) != today


class ReminderScheduler:
    """Runs the reminder pass for every user."""

    def __init__(
        self,
        repository: Optional[TaskRepository] = None,
        dispatcher: Optional[Dispatcher] = None,
    ):
        self.repository = repository or TaskRepository()
        self.dispatcher = dispatcher or send_reminder

    async def run_notification_pass(self, now: Optional[datetime] = None) -> ReminderPassSummary:
        """
        Send the reminders scheduled for the current minute.

        ``last_notified_at`` is stamped only after a successful dispatch. A
        failed dispatch is not retried within the run.
        """
        now = as_aware_utc(now) if now else utc_now()

        with correlation_context(prefix="reminders") as correlation_id:
            summary = ReminderPassSummary(run_at=now, correlation_id=correlation_id)

            with log_timing("reminder_pass", logger=logger):
                zones = await load_profile_zones(self.repository)
                owners = await self.repository.list_task_owners(recurring_only=True)

                for user_id in owners:
                    try:
                        tz = await owner_timezone(self.repository, zones, user_id)
                        await self._run_user(user_id, tz, now, summary)
                        summary.users_processed += 1
                    except Exception as e:
                        summary.users_failed += 1
                        logger.error(
                            "Reminder pass failed for user",
                            user_id=mask_user_id(user_id),
                            error=str(e),
                            exc_info=True,
                        )

            if summary.reminders_sent or summary.reminders_failed or summary.users_failed:
                logger.info(
                    "Reminder pass completed",
                    users_processed=summary.users_processed,
                    users_failed=summary.users_failed,
                    reminders_sent=summary.reminders_sent,
                    reminders_failed=summary.reminders_failed,
                )
        return summary

    async def _run_user(self, user_id: str, tz: tzinfo, now: datetime, summary: ReminderPassSummary) -> None:
        local_now = to_local(now, tz)

        rows = await self.repository.list_tasks(user_id=user_id, recurring_only=True)
        tasks = parse_task_rows(rows, summary, user_id=user_id)
        summary.tasks_examined += len(tasks)

        for task in tasks:
            if not should_send_reminder(task, local_now):
                continue

            logger.info(
                "Sending task reminder",
                user_id=mask_user_id(user_id),
                task_id=task.id,
                title=sanitize_task_title(task.title),
                recurrence=describe_recurrence(task),
                reminder_time=task.reminder_time,
            )

            result = await self.dispatcher(user_id, task.id)
            if not result.ok:
                summary.reminders_failed += 1
                continue

            try:
                await self.repository.update_task(task.id, {"last_notified_at": now.isoformat()})
            except Exception as e:
                # The reminder went out; a failed stamp may cause one duplicate
                logger.error(
                    "Failed to record reminder timestamp",
                    task_id=task.id,
                    error=str(e),
                )
            summary.reminders_sent += 1


# Global scheduler instance
_reminder_scheduler: Optional[ReminderScheduler] = None


def get_reminder_scheduler() -> ReminderScheduler:
    """Get or create global reminder scheduler instance."""
    global _reminder_scheduler
    if _reminder_scheduler is None:
        _reminder_scheduler = ReminderScheduler()
    return _reminder_scheduler
