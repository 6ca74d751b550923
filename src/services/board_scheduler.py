"""Board transition scheduler - the daily pass that re-files tasks between boards.

``origin_board`` is a cached classification. Once a day this pass recomputes
it from the due date, the recurrence rule and the completion state, in four
ordered rules:

1. overdue          - missed tasks leave the today boards (and one-off tasks
                      past their due date leave any open board)
2. completed        - tasks completed on an earlier day leave the today boards
3. recurring_reset  - recurring tasks due today start a fresh cycle
4. overdue_release  - overdue tasks whose obstruction cleared return to general

Every rule re-derives its decision from the task row, so running the pass
twice for the same day changes nothing the second time.
"""

from datetime import datetime, timedelta, tzinfo
from typing import Any, Callable, Optional

from pydantic import ValidationError

from src.models.board_pass import BoardTransition, DailyPassSummary, TransitionRule
from src.models.profile import UserProfile
from src.models.task import Task, Board, TODAY_BOARDS, ACTIVE_BOARDS
from src.services.completion import is_completed_for_cycle_on
from src.services.recurrence import is_due_on, previous_occurrence
from src.services.task_repository import TaskRepository
from src.services.user_timezones import resolve_timezone
from src.utils.dates import as_aware_utc, local_date, to_local, utc_now
from src.utils.logging import (
    get_structured_logger,
    log_timing,
    correlation_context,
    mask_user_id,
)

logger = get_structured_logger(__name__)

RuleFn = Callable[[Task, datetime, Optional[tzinfo]], Optional[dict[str, Any]]]


def completion_day(task: Task, tz: Optional[tzinfo]):
    """Calendar day the task was last completed on, in the user's zone."""
    if task.last_successful_completion_date is not None:
        return task.last_successful_completion_date
    return local_date(task.completed_at, tz)


def overdue_transition(task: Task, now: datetime, tz: Optional[tzinfo]) -> Optional[dict[str, Any]]:
    """Rule 1: move a missed, still-incomplete task to ``overdue``."""
    if task.is_completed:
        return None

    today = to_local(now, tz).date()

    if not task.is_recurring:
        if task.origin_board in (Board.OVERDUE, Board.COMPLETED):
            return None
        if task.due_date is None or task.due_date >= today:
            return None
    else:
        if task.origin_board not in TODAY_BOARDS:
            return None
        # Occurrences missed since the last completion; with none on record,
        # only yesterday's
        last = task.last_successful_completion_date
        since = last + timedelta(days=1) if last is not None else today - timedelta(days=1)
        if previous_occurrence(task, today, since=since) is None:
            return None

    return {
        "origin_board": Board.OVERDUE.value,
        "last_moved_to_overdue_at": now.isoformat(),
        "is_completed": False,
    }


def completed_transition(task: Task, now: datetime, tz: Optional[tzinfo]) -> Optional[dict[str, Any]]:
    """Rule 2: a task completed on an earlier day leaves the today boards."""
    if not task.is_completed or task.origin_board not in TODAY_BOARDS:
        return None

    done_on = completion_day(task, tz)
    if done_on is None or done_on >= to_local(now, tz).date():
        return None

    return {
        "origin_board": Board.COMPLETED.value,
        "completed_at": now.isoformat(),
    }


def recurring_reset_transition(task: Task, now: datetime, tz: Optional[tzinfo]) -> Optional[dict[str, Any]]:
    """Rule 3: a recurring task due today that is not done for this cycle starts fresh.

    Tasks not due today are left alone so they never look due on an off day.
    Overdue tasks are handled by the release rule.
    """
    if not task.is_recurring or task.origin_board == Board.OVERDUE:
        return None

    today = to_local(now, tz).date()
    if not is_due_on(task, today) or is_completed_for_cycle_on(task, today):
        return None

    updates: dict[str, Any] = {}
    if task.is_completed:
        updates["is_completed"] = False
    if task.origin_board not in ACTIVE_BOARDS:
        updates["origin_board"] = Board.GENERAL.value
    return updates or None


def overdue_release_transition(task: Task, now: datetime, tz: Optional[tzinfo]) -> Optional[dict[str, Any]]:
    """Rule 4: overdue is not terminal once the task is due again."""
    if task.origin_board != Board.OVERDUE:
        return None

    today = to_local(now, tz).date()

    if not task.is_recurring:
        if task.is_completed or task.due_date is None or task.due_date < today:
            return None
        return {"origin_board": Board.GENERAL.value}

    if not is_due_on(task, today) or is_completed_for_cycle_on(task, today):
        return None
    # A task moved to overdue by this day's pass stays there until the next day
    moved_on = local_date(task.last_moved_to_overdue_at, tz)
    if moved_on is not None and moved_on >= today:
        return None

    updates: dict[str, Any] = {"origin_board": Board.GENERAL.value}
    if task.is_completed:
        updates["is_completed"] = False
    return updates


DAILY_RULES: tuple[tuple[TransitionRule, RuleFn], ...] = (
    (TransitionRule.OVERDUE, overdue_transition),
    (TransitionRule.COMPLETED, completed_transition),
    (TransitionRule.RECURRING_RESET, recurring_reset_transition),
    (TransitionRule.OVERDUE_RELEASE, overdue_release_transition),
)


def apply_updates(task: Task, updates: dict[str, Any]) -> Task:
    """Return ``task`` as it reads after ``updates`` were written."""
    return Task.model_validate({**task.model_dump(), **updates})


def plan_daily_transitions(tasks: list[Task], now: datetime, tz: Optional[tzinfo]) -> list[BoardTransition]:
    """Dry-run the four rules in order over an in-memory task list."""
    current = list(tasks)
    planned: list[BoardTransition] = []
    for rule, decide in DAILY_RULES:
        for index, task in enumerate(current):
            updates = decide(task, now, tz)
            if not updates:
                continue
            planned.append(_transition(rule, task, updates))
            current[index] = apply_updates(task, updates)
    return planned


def _transition(rule: TransitionRule, task: Task, updates: dict[str, Any]) -> BoardTransition:
    return BoardTransition(
        task_id=task.id,
        rule=rule,
        from_board=task.origin_board,
        to_board=Board(updates.get("origin_board", task.origin_board)),
        updates=updates,
    )


async def load_profile_zones(repository: TaskRepository) -> dict[str, Optional[str]]:
    """Timezone name per user, from the ``profiles`` table."""
    zones: dict[str, Optional[str]] = {}
    for row in await repository.list_profiles():
        try:
            profile = UserProfile.model_validate(row)
        except ValidationError as e:
            logger.warning("Skipping unreadable profile row", error=str(e))
            continue
        zones[profile.id] = profile.timezone
    return zones


async def owner_timezone(repository: TaskRepository, zones: dict[str, Optional[str]], user_id: str) -> tzinfo:
    """Zone a task owner's days live in.

    Owners without a profile row go through the timezone lookup, which falls
    back to the default zone.
    """
    if user_id in zones:
        return resolve_timezone(zones[user_id])

    logger.info("Task owner has no profile, looking up timezone", user_id=mask_user_id(user_id))
    return resolve_timezone(await repository.get_user_timezone(user_id))


class BoardScheduler:
    """Runs the daily board pass for every user."""

    def __init__(self, repository: Optional[TaskRepository] = None):
        self.repository = repository or TaskRepository()

    async def run_daily_pass(self, now: Optional[datetime] = None) -> DailyPassSummary:
        """
        Re-file every user's tasks.

        A failure for one user or one task is logged and counted; the rest of
        the batch continues and the next run retries whatever is still stale.
        """
        now = as_aware_utc(now) if now else utc_now()

        with correlation_context(prefix="daily") as correlation_id:
            summary = DailyPassSummary(run_at=now, correlation_id=correlation_id)

            with log_timing("daily_board_pass", logger=logger):
                zones = await load_profile_zones(self.repository)
                owners = await self.repository.list_task_owners()
                logger.info("Daily board pass started", users=len(owners), run_at=now.isoformat())

                for user_id in owners:
                    try:
                        tz = await owner_timezone(self.repository, zones, user_id)
                        await self._run_user(user_id, tz, now, summary)
                        summary.users_processed += 1
                    except Exception as e:
                        summary.users_failed += 1
                        logger.error(
                            "Daily board pass failed for user",
                            user_id=mask_user_id(user_id),
                            error=str(e),
                            exc_info=True,
                        )

            logger.info(
                "Daily board pass completed",
                users_processed=summary.users_processed,
                users_failed=summary.users_failed,
                tasks_examined=summary.tasks_examined,
                task_failures=summary.task_failures,
                transitions=summary.transitions,
            )
        return summary

    async def _run_user(self, user_id: str, tz: tzinfo, now: datetime, summary: DailyPassSummary) -> None:
        rows = await self.repository.list_tasks(user_id=user_id)
        tasks = parse_task_rows(rows, summary, user_id=user_id)
        summary.tasks_examined += len(tasks)

        logger.debug(
            "Evaluating user tasks",
            user_id=mask_user_id(user_id),
            timezone=str(tz),
            local_date=to_local(now, tz).date().isoformat(),
            tasks=len(tasks),
        )

        # Rules run in order over the whole set so later rules see earlier moves
        for rule, decide in DAILY_RULES:
            for index, task in enumerate(tasks):
                if not decide(task, now, tz):
                    continue
                tasks[index] = await self._apply(rule, decide, task, now, tz, summary)

    async def _apply(
        self,
        rule: TransitionRule,
        decide: RuleFn,
        task: Task,
        now: datetime,
        tz: Optional[tzinfo],
        summary: DailyPassSummary,
    ) -> Task:
        try:
            if rule == TransitionRule.RECURRING_RESET:
                # The user may have completed the task since the batch read
                fresh = await self.repository.get_task(task.id)
                if fresh is None:
                    return task
                task = Task.model_validate(fresh)

            updates = decide(task, now, tz)
            if not updates:
                return task

            transition = _transition(rule, task, updates)
            await self.repository.update_task(task.id, updates)
        except Exception as e:
            summary.task_failures += 1
            logger.error(
                "Board transition failed",
                task_id=task.id,
                rule=rule.value,
                error=str(e),
            )
            return task

        summary.record(transition)
        logger.info(
            "Task moved",
            task_id=task.id,
            rule=rule.value,
            from_board=transition.from_board.value,
            to_board=transition.to_board.value,
        )
        return apply_updates(task, updates)


def parse_task_rows(rows: list[dict], summary: Any, user_id: Optional[str] = None) -> list[Task]:
    """Validate task rows, skipping (and counting) rows that cannot be read."""
    tasks: list[Task] = []
    for row in rows:
        try:
            tasks.append(Task.model_validate(row))
        except ValidationError as e:
            summary.tasks_skipped_invalid += 1
            logger.warning(
                "Skipping unreadable task row",
                user_id=mask_user_id(user_id),
                task_id=row.get("id") if isinstance(row, dict) else None,
                error=str(e),
            )
    return tasks


# Global scheduler instance
_board_scheduler: Optional[BoardScheduler] = None


def get_board_scheduler() -> BoardScheduler:
    """Get or create global board scheduler instance."""
    global _board_scheduler
    if _board_scheduler is None:
        _board_scheduler = BoardScheduler()
    return _board_scheduler
