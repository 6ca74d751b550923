"""Date and timezone helpers shared by the evaluators and the schedulers.

Everything here is pure: callers pass the reference instant explicitly so
day-boundary behaviour can be tested without touching the system clock.
"""

from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional, Union

from dateutil.relativedelta import relativedelta, SU


def utc_now() -> datetime:
    """Current instant as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_aware_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC (the database stores timestamptz in UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_local(value: datetime, tz: Optional[tzinfo]) -> datetime:
    """Convert an instant to wall-clock time in ``tz`` (UTC when tz is None)."""
    return as_aware_utc(value).astimezone(tz or timezone.utc)


def local_date(value: Optional[datetime], tz: Optional[tzinfo]) -> Optional[date]:
    """Calendar date of an instant in ``tz``."""
    if value is None:
        return None
    return to_local(value, tz).date()


def parse_calendar_date(value: Union[str, date, datetime, None]) -> Optional[date]:
    """Parse a date column.

    Accepts ``YYYY-MM-DD`` or a full ISO timestamp; for timestamps the literal
    calendar-date part is kept (no timezone shift), which is how the web client
    writes due dates.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if "T" in text:
        text = text.split("T", 1)[0]
    elif " " in text:
        text = text.split(" ", 1)[0]
    return date.fromisoformat(text)


def week_start(day: date) -> date:
    """Sunday that starts the calendar week containing ``day``."""
    return day + relativedelta(weekday=SU(-1))


def month_start(day: date) -> date:
    return day + relativedelta(day=1)


def month_end(day: date) -> date:
    # relativedelta clamps day=31 to the last day of the month
    return day + relativedelta(day=31)


def js_weekday(day: date) -> int:
    """Weekday index with Sunday=0 .. Saturday=6."""
    return (day.weekday() + 1) % 7


def scheduled_instant(day: date, time_of_day: time, tz: Optional[tzinfo]) -> datetime:
    """Wall-clock ``time_of_day`` on ``day`` in ``tz``, truncated to the minute."""
    return datetime.combine(
        day,
        time_of_day.replace(second=0, microsecond=0),
        tzinfo=tz or timezone.utc,
    )


def is_same_minute(local_now: datetime, scheduled: datetime) -> bool:
    """True when ``local_now`` falls inside the minute that starts at ``scheduled``.

    Both values must carry the same tzinfo; the comparison is on wall-clock time.
    """
    return scheduled <= local_now < scheduled + timedelta(minutes=1)
