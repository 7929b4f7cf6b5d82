# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Recurrence expansion. Pure computation, no side effects.

Turns a template's rule into the ascending list of calendar dates it fires
on inside a window. Rules are evaluated with dateutil.rrule:

- daily     every date
- weekly    every ``day`` weekday (0=Sunday ... 6=Saturday)
- biweekly  every other ``day`` weekday, weeks counted from the template's
            start_date so the same template always yields the same dates
- monthly   day-of-month ``day``; months without that day are skipped
"""

from datetime import date, datetime, time
from typing import Optional

from dateutil.rrule import DAILY, MONTHLY, WEEKLY, rrule

from scheduling.models.domain import RecurrencePattern

WEEKDAY_NAMES = (
    "Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday",
)


def to_python_weekday(day: int) -> int:
    """Convert 0=Sunday numbering to date.weekday() numbering (0=Monday)."""
    return (day + 6) % 7


def expand(
    pattern: RecurrencePattern | str,
    day: Optional[int],
    window_start: date,
    window_end: date,
    start_date: date,
    end_date: Optional[date] = None,
) -> list[date]:
    """
    Dates the rule fires on within [window_start, window_end] intersected
    with the template's own [start_date, end_date]. Both bounds inclusive.
    """
    pattern = RecurrencePattern(pattern)
    lower = max(window_start, start_date)
    upper = window_end if end_date is None else min(window_end, end_date)
    if lower > upper:
        return []

    rule = _build_rule(pattern, day, start_date, upper)
    occurrences = rule.between(
        datetime.combine(lower, time.min),
        datetime.combine(upper, time.min),
        inc=True,
    )
    return [dt.date() for dt in occurrences]


def _build_rule(
    pattern: RecurrencePattern,
    day: Optional[int],
    anchor: date,
    until: date,
) -> rrule:
    dtstart = datetime.combine(anchor, time.min)
    until_dt = datetime.combine(until, time.min)

    if pattern is RecurrencePattern.DAILY:
        return rrule(DAILY, dtstart=dtstart, until=until_dt)

    if pattern in (RecurrencePattern.WEEKLY, RecurrencePattern.BIWEEKLY):
        if day is None or not 0 <= day <= 6:
            raise ValueError(f"{pattern.value} recurrence needs a weekday between 0 and 6")
        # Weeks start on the anchor's weekday so biweekly parity counts from start_date.
        return rrule(
            WEEKLY,
            interval=2 if pattern is RecurrencePattern.BIWEEKLY else 1,
            byweekday=to_python_weekday(day),
            wkst=anchor.weekday(),
            dtstart=dtstart,
            until=until_dt,
        )

    if day is None or not 1 <= day <= 31:
        raise ValueError("monthly recurrence needs a day of month between 1 and 31")
    return rrule(MONTHLY, bymonthday=day, dtstart=dtstart, until=until_dt)


def recurrence_label(pattern: RecurrencePattern | str, day: Optional[int]) -> str:
    pattern = RecurrencePattern(pattern)
    if pattern is RecurrencePattern.DAILY:
        return "Every day"
    if pattern is RecurrencePattern.WEEKLY:
        return f"Every {WEEKDAY_NAMES[day]}"
    if pattern is RecurrencePattern.BIWEEKLY:
        return f"Every other {WEEKDAY_NAMES[day]}"
    return f"Day {day} of each month"
