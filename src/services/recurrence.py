"""Recurrence evaluator - decides whether a task is due on a given calendar date.

This is the single place that interprets ``recurrence_type`` and
``recurrence_details``. The daily board pass, the reminder pass and the
dashboard view all call into it.

Malformed recurrence data never raises: a task whose rule cannot be parsed
is simply not due.
"""

from datetime import date, datetime, time, tzinfo
from typing import Optional

from dateutil.relativedelta import relativedelta
from dateutil.rrule import DAILY, MONTHLY, WEEKLY, MO, TU, WE, TH, FR, SA, SU, rrule

from src.models.task import Task, RecurrenceType
from src.utils.dates import js_weekday, to_local


# Sunday=0 .. Saturday=6
DAYS_OF_WEEK = {
    "sunday": 0,
    "monday": 1,
    "tuesday": 2,
    "wednesday": 3,
    "thursday": 4,
    "friday": 5,
    "saturday": 6,
}

DAY_LABELS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")

# rrule weekday constants indexed Sunday=0 .. Saturday=6
RRULE_WEEKDAYS = (SU, MO, TU, WE, TH, FR, SA)

# Long enough to reach the previous day-31 occurrence across a short month
LOOKBACK = relativedelta(months=2)


def parse_weekdays(details: Optional[str]) -> set[int]:
    """Parse ``"Monday,Wednesday"`` into weekday indexes; unknown names are dropped."""
    if not details:
        return set()
    days = set()
    for name in details.split(","):
        index = DAYS_OF_WEEK.get(name.strip().lower())
        if index is not None:
            days.add(index)
    return days


def parse_month_day(details: Optional[str]) -> Optional[int]:
    """Parse a day-of-month (1-31); anything else yields None."""
    if details is None:
        return None
    try:
        day = int(str(details).strip())
    except ValueError:
        return None
    if 1 <= day <= 31:
        return day
    return None


def is_due_on(task: Task, reference_date: date) -> bool:
    """Whether ``task`` has an occurrence on ``reference_date``.

    ``reference_date`` must already be expressed in the task owner's timezone.
    Monthly rules never roll over: day 31 does not fire in 30-day months.
    """
    recurrence = task.recurrence_type

    if recurrence == RecurrenceType.NONE:
        return task.due_date is not None and task.due_date == reference_date

    if recurrence == RecurrenceType.DAILY:
        return True

    if recurrence == RecurrenceType.DAILY_WEEKDAY:
        return 1 <= js_weekday(reference_date) <= 5

    if recurrence == RecurrenceType.WEEKLY:
        return js_weekday(reference_date) in parse_weekdays(task.recurrence_details)

    if recurrence == RecurrenceType.MONTHLY:
        day = parse_month_day(task.recurrence_details)
        return day is not None and reference_date.day == day

    return False


def is_due_today(task: Task, now: datetime, tz: Optional[tzinfo]) -> bool:
    """``is_due_on`` for the calendar day ``now`` falls on in ``tz``."""
    return is_due_on(task, to_local(now, tz).date())


def occurrence_rule(task: Task, start: date) -> Optional[rrule]:
    """rrule generating the occurrences of ``task`` from ``start`` onwards.

    Returns None for one-off tasks and for rules that cannot be parsed.
    Monthly rules use ``bymonthday``, which skips months without that day.
    """
    dtstart = datetime.combine(start, time())
    recurrence = task.recurrence_type

    if recurrence == RecurrenceType.DAILY:
        return rrule(DAILY, dtstart=dtstart)

    if recurrence == RecurrenceType.DAILY_WEEKDAY:
        return rrule(DAILY, dtstart=dtstart, byweekday=(MO, TU, WE, TH, FR))

    if recurrence == RecurrenceType.WEEKLY:
        days = parse_weekdays(task.recurrence_details)
        if not days:
            return None
        return rrule(WEEKLY, dtstart=dtstart, byweekday=[RRULE_WEEKDAYS[d] for d in sorted(days)])

    if recurrence == RecurrenceType.MONTHLY:
        day = parse_month_day(task.recurrence_details)
        if day is None:
            return None
        return rrule(MONTHLY, dtstart=dtstart, bymonthday=day)

    return None


def previous_occurrence(task: Task, before: date, since: Optional[date] = None) -> Optional[date]:
    """Latest occurrence of ``task`` strictly before ``before`` and no earlier than ``since``.

    ``since`` defaults to ``LOOKBACK`` before ``before``.
    """
    if since is None:
        since = before - LOOKBACK
    if since >= before:
        return None

    rule = occurrence_rule(task, since)
    if rule is None:
        return None

    found = rule.before(datetime.combine(before, time()))
    return found.date() if found else None


def describe_recurrence(task: Task) -> Optional[str]:
    """Short human description of the recurrence rule, None for one-off tasks."""
    recurrence = task.recurrence_type

    if recurrence == RecurrenceType.DAILY:
        return "Recurs daily"
    if recurrence == RecurrenceType.DAILY_WEEKDAY:
        return "Recurs on weekdays"
    if recurrence == RecurrenceType.WEEKLY:
        days = sorted(parse_weekdays(task.recurrence_details))
        if not days:
            return "Recurs weekly"
        return "Recurs weekly on: " + ", ".join(DAY_LABELS[d] for d in days)
    if recurrence == RecurrenceType.MONTHLY:
        day = parse_month_day(task.recurrence_details)
        if day is None:
            return "Recurs monthly"
        return f"Recurs monthly on day {day}"
    return None
