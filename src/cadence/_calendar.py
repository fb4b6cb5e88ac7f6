from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum

# =============================================================================
# Calendar Arithmetic
# =============================================================================
# Month and year arithmetic follows overflow semantics: the day of month is
# kept as an offset from the first of the target month, so a day that does
# not exist in the target month rolls over into the following month.
#
#   2024-01-31 + 1 month = 2024-02-31 -> 2024-03-02
#   2024-02-29 + 1 year  = 2025-02-29 -> 2025-03-01
#
# Clock time and tzinfo are carried over untouched; arithmetic on aware
# datetimes is wall-clock arithmetic.
# =============================================================================


class CalendarUnit(Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"

    def __str__(self) -> str:
        return self.value


def add_calendar_unit(dt: datetime, amount: int, unit: CalendarUnit) -> datetime:
    match unit:
        case CalendarUnit.DAY:
            return dt + timedelta(days=amount)
        case CalendarUnit.WEEK:
            return dt + timedelta(weeks=amount)
        case CalendarUnit.MONTH:
            return _add_months(dt, amount)
        case CalendarUnit.YEAR:
            return _add_months(dt, amount * 12)


def _add_months(dt: datetime, months: int) -> datetime:
    year, month_index = divmod(dt.year * 12 + dt.month - 1 + months, 12)
    first = dt.replace(year=year, month=month_index + 1, day=1)
    return first + timedelta(days=dt.day - 1)


def cron_weekday(dt: datetime) -> int:
    """Day of week with Sunday=0, Monday=1, ..., Saturday=6."""
    return (dt.weekday() + 1) % 7


def days_between(a: datetime, b: datetime) -> int:
    return (b.date() - a.date()).days


def months_between(a: datetime, b: datetime) -> int:
    return b.year * 12 + b.month - (a.year * 12 + a.month)


def years_between(a: datetime, b: datetime) -> int:
    return b.year - a.year


def at_time_of(day: datetime, clock: datetime) -> datetime:
    """The date of `day` at the wall-clock time of `clock`."""
    return day.replace(
        hour=clock.hour,
        minute=clock.minute,
        second=clock.second,
        microsecond=clock.microsecond,
    )


def truncate_to_minute(dt: datetime) -> datetime:
    return dt.replace(second=0, microsecond=0)
