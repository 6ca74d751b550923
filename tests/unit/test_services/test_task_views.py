"""Tests for the dashboard "today" view."""

import pytest
from zoneinfo import ZoneInfo
from src.models.task import Task
from src.services.task_views import today_tasks
from tests.utils.helpers import at

SAO_PAULO = ZoneInfo("America/Sao_Paulo")
NOW = at(2025, 3, 11, 12, 0)  # Tuesday, 09:00 in Sao Paulo


@pytest.mark.unit
def test_lists_tasks_due_today_with_live_status():
    tasks = [
        Task(id="daily", recurrence_type="daily", is_completed=True,
             last_successful_completion_date="2025-03-10"),
        Task(id="weekly-done", recurrence_type="weekly", recurrence_details="Monday,Tuesday",
             is_completed=True, last_successful_completion_date="2025-03-11"),
        Task(id="weekly-off", recurrence_type="weekly", recurrence_details="Friday"),
        Task(id="one-off", due_date="2025-03-11"),
        Task(id="tomorrow", due_date="2025-03-12"),
    ]

    views = {view.task.id: view for view in today_tasks(tasks, NOW, SAO_PAULO)}

    assert set(views) == {"daily", "weekly-done", "one-off"}
    # The stored flag is stale: yesterday's completion does not count today
    assert views["daily"].completed is False
    assert views["weekly-done"].completed is True
    assert views["weekly-done"].recurrence_label == "Recurs weekly on: Mon, Tue"
    assert views["one-off"].recurrence_label is None


@pytest.mark.unit
def test_timed_tasks_first():
    tasks = [
        Task(id="untimed", recurrence_type="daily"),
        Task(id="evening", recurrence_type="daily", recurrence_time="19:00"),
        Task(id="morning", due_date="2025-03-11", time="07:30"),
    ]

    views = today_tasks(tasks, NOW, SAO_PAULO)

    assert [view.task.id for view in views] == ["morning", "evening", "untimed"]


@pytest.mark.unit
def test_uses_user_day():
    """01:00 UTC on the 12th is still the 11th in Sao Paulo."""
    tasks = [Task(id="t", due_date="2025-03-11")]

    assert len(today_tasks(tasks, at(2025, 3, 12, 1, 0), SAO_PAULO)) == 1
    assert today_tasks(tasks, at(2025, 3, 12, 1, 0), None) == []
