"""Read-side views for the dashboard.

These answer "what is due today and is it done" live, without waiting for
the next daily pass to re-file boards. The scheduler endpoints do not use
this module; it is the import surface for dashboard code that renders the
"today" list from task rows it has already loaded.
"""

from datetime import datetime, tzinfo
from typing import Iterable, Optional

from pydantic import BaseModel

from src.models.task import Task
from src.services.completion import is_completed_for_cycle_on
from src.services.recurrence import describe_recurrence, is_due_on
from src.utils.dates import to_local


class TaskView(BaseModel):
    """A task as shown on the dashboard's "today" list."""
    task: Task
    completed: bool
    recurrence_label: Optional[str] = None


def _time_sort_key(view: TaskView) -> tuple[int, str]:
    # Timed tasks first, in time order; untimed keep their relative order
    value = view.task.time or view.task.recurrence_time
    return (0, value) if value else (1, "")


def today_tasks(tasks: Iterable[Task], now: datetime, tz: Optional[tzinfo]) -> list[TaskView]:
    """Tasks due on the user's current day, with their live completion status."""
    today = to_local(now, tz).date()
    views = [
        TaskView(
            task=task,
            completed=is_completed_for_cycle_on(task, today),
            recurrence_label=describe_recurrence(task),
        )
        for task in tasks
        if is_due_on(task, today)
    ]
    return sorted(views, key=_time_sort_key)
