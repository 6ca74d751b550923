"""Completion-status resolver.

For one-off tasks the stored ``is_completed`` flag is the truth. For
recurring tasks the flag only describes the cycle it was set in, so the
resolver reads ``last_successful_completion_date`` against the cycle window
that contains "now" instead.

Nothing here performs I/O; dashboards call it on every render.
"""

from datetime import date, datetime, timedelta, tzinfo
from typing import Any, Optional

from src.models.task import Task, RecurrenceType, Board
from src.utils.dates import month_end, month_start, to_local, week_start


def cycle_window(recurrence_type: RecurrenceType, today: date) -> tuple[date, date]:
    """Inclusive first/last day of the cycle containing ``today``.

    Weeks start on Sunday.
    """
    if recurrence_type == RecurrenceType.WEEKLY:
        start = week_start(today)
        return start, start + timedelta(days=6)
    if recurrence_type == RecurrenceType.MONTHLY:
        return month_start(today), month_end(today)
    return today, today


def is_completed_for_cycle_on(task: Task, today: date) -> bool:
    """Completion status for the cycle containing the (already localized) ``today``."""
    if not task.is_recurring:
        return task.is_completed

    last = task.last_successful_completion_date
    if last is None:
        return False

    start, end = cycle_window(task.recurrence_type, today)
    return start <= last <= end


def is_completed_for_current_cycle(task: Task, now: datetime, tz: Optional[tzinfo] = None) -> bool:
    """Whether ``task`` counts as done right now for its owner in ``tz``."""
    return is_completed_for_cycle_on(task, to_local(now, tz).date())


def completion_updates(task: Task, completing: bool, now: datetime, tz: Optional[tzinfo]) -> dict[str, Any]:
    """Field updates for the user marking a task done (or undoing it).

    The completion date is recorded in the user's zone so that the resolver
    and the daily pass agree on which day the completion belongs to. One-off
    tasks change board with their status; recurring tasks stay where they are
    and are re-filed by the daily pass.
    """
    updates: dict[str, Any] = {"is_completed": completing}

    if completing:
        updates["completed_at"] = now.isoformat()
        updates["last_successful_completion_date"] = to_local(now, tz).date().isoformat()
        if not task.is_recurring:
            updates["origin_board"] = Board.COMPLETED.value
    else:
        updates["completed_at"] = None
        updates["last_successful_completion_date"] = None
        if not task.is_recurring:
            updates["origin_board"] = Board.GENERAL.value

    return updates
