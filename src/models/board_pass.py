"""Models describing the outcome of scheduler passes."""

from enum import Enum
from typing import Optional, Any
from datetime import datetime
from pydantic import BaseModel, Field

from src.models.task import Board


class TransitionRule(str, Enum):
    """Daily pass rules, in the order they are applied."""
    OVERDUE = "overdue"
    COMPLETED = "completed"
    RECURRING_RESET = "recurring_reset"
    OVERDUE_RELEASE = "overdue_release"


class BoardTransition(BaseModel):
    """A single task update decided by the daily pass."""
    task_id: str
    rule: TransitionRule
    from_board: Board
    to_board: Board
    updates: dict[str, Any] = Field(default_factory=dict)


class DailyPassSummary(BaseModel):
    """Counters for one run of the daily board pass."""
    run_at: datetime
    correlation_id: Optional[str] = None
    users_processed: int = 0
    users_failed: int = 0
    tasks_examined: int = 0
    tasks_skipped_invalid: int = 0
    task_failures: int = 0
    transitions: dict[str, int] = Field(
        default_factory=lambda: {rule.value: 0 for rule in TransitionRule}
    )

    def record(self, transition: BoardTransition) -> None:
        self.transitions[transition.rule.value] = self.transitions.get(transition.rule.value, 0) + 1


class ReminderPassSummary(BaseModel):
    """Counters for one run of the per-minute reminder pass."""
    run_at: datetime
    correlation_id: Optional[str] = None
    users_processed: int = 0
    users_failed: int = 0
    tasks_examined: int = 0
    tasks_skipped_invalid: int = 0
    reminders_sent: int = 0
    reminders_failed: int = 0


class DispatchResult(BaseModel):
    """Opaque result of handing a reminder to the notification function."""
    ok: bool
    error: Optional[str] = None
