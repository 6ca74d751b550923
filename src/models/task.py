"""Task model - the row the recurrence and board rules operate on."""

from enum import Enum
from typing import Optional, Any
from datetime import date, datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.utils.dates import parse_calendar_date


class RecurrenceType(str, Enum):
    """Recurrence rule kinds."""
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    # Legacy value still written by older task forms: Monday to Friday
    DAILY_WEEKDAY = "daily_weekday"


class Board(str, Enum):
    """Boards a task can be displayed on."""
    GENERAL = "general"
    TODAY_PRIORITY = "today_priority"
    TODAY_NO_PRIORITY = "today_no_priority"
    OVERDUE = "overdue"
    COMPLETED = "completed"
    RECURRENT = "recurrent"
    JOBS_WOE_TODAY = "jobs_woe_today"
    CLIENT_TASKS = "client_tasks"


TODAY_BOARDS = frozenset({
    Board.TODAY_PRIORITY,
    Board.TODAY_NO_PRIORITY,
    Board.JOBS_WOE_TODAY,
})

# Boards that keep a task in the daily queue
ACTIVE_BOARDS = TODAY_BOARDS | {Board.GENERAL, Board.RECURRENT}


class Task(BaseModel):
    """Task row as stored in the ``tasks`` table."""
    model_config = ConfigDict(extra="ignore", use_enum_values=False)

    id: str = Field(..., description="Task ID")
    user_id: Optional[str] = Field(None, description="Owning user ID")
    title: Optional[str] = Field(None, description="Task title")
    due_date: Optional[date] = Field(None, description="Due date for one-off tasks")
    time: Optional[str] = Field(None, description="Time of day (HH:mm)")
    recurrence_type: RecurrenceType = Field(default=RecurrenceType.NONE)
    recurrence_details: Optional[str] = Field(
        None,
        description="Weekly: comma-separated weekday names. Monthly: day of month."
    )
    recurrence_time: Optional[str] = Field(None, description="Reminder time for recurring tasks (HH:mm)")
    is_completed: bool = Field(default=False, description="Raw completion flag")
    last_successful_completion_date: Optional[date] = None
    origin_board: Board = Field(default=Board.GENERAL)
    completed_at: Optional[datetime] = None
    last_notified_at: Optional[datetime] = None
    last_moved_to_overdue_at: Optional[datetime] = None

    @field_validator("due_date", "last_successful_completion_date", mode="before")
    @classmethod
    def _parse_date_column(cls, value: Any) -> Optional[date]:
        return parse_calendar_date(value)

    @field_validator("recurrence_details", mode="before")
    @classmethod
    def _coerce_details(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return str(value)

    @field_validator("recurrence_type", mode="before")
    @classmethod
    def _default_recurrence(cls, value: Any) -> Any:
        return value or RecurrenceType.NONE

    @field_validator("is_completed", mode="before")
    @classmethod
    def _null_is_incomplete(cls, value: Any) -> Any:
        return False if value is None else value

    @property
    def is_recurring(self) -> bool:
        return self.recurrence_type != RecurrenceType.NONE

    @property
    def reminder_time(self) -> Optional[str]:
        """Time of day a reminder should fire, preferring the recurrence time."""
        return self.recurrence_time or self.time
