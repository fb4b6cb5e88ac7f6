from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class FieldKind(Enum):
    ALL = "all"
    SPECIFIC = "specific"
    RANGE = "range"
    STEP = "step"
    LIST = "list"

    def __str__(self) -> str:
        return self.value


class Frequency(Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    def __str__(self) -> str:
        return self.value


class StepStrategy(Enum):
    """How the recurrence search moves from one candidate to the next."""

    DAY_SCAN = "day_scan"  # +1 day, the matcher does the filtering
    JUMP = "jump"  # +interval units of the rule's frequency

    def __str__(self) -> str:
        return self.value


# --- Cron field bounds ---


@dataclass(frozen=True, slots=True)
class FieldBounds:
    name: str
    min_value: int
    max_value: int


MINUTE = FieldBounds("minute", 0, 59)
HOUR = FieldBounds("hour", 0, 23)
DAY_OF_MONTH = FieldBounds("day_of_month", 1, 31)
MONTH = FieldBounds("month", 1, 12)
DAY_OF_WEEK = FieldBounds("day_of_week", 0, 6)

CRON_FIELDS: tuple[FieldBounds, ...] = (MINUTE, HOUR, DAY_OF_MONTH, MONTH, DAY_OF_WEEK)


# --- Cron values ---


@dataclass(frozen=True, slots=True)
class FieldSet:
    kind: FieldKind
    values: tuple[int, ...]

    def __contains__(self, value: object) -> bool:
        return value in self.values

    def __len__(self) -> int:
        return len(self.values)


@dataclass(frozen=True, slots=True)
class CronParts:
    minute: str
    hour: str
    day_of_month: str
    month: str
    day_of_week: str

    def __str__(self) -> str:
        return " ".join(
            (self.minute, self.hour, self.day_of_month, self.month, self.day_of_week)
        )


@dataclass(frozen=True, slots=True)
class CronPattern:
    parts: CronParts
    minute: FieldSet
    hour: FieldSet
    day_of_month: FieldSet
    month: FieldSet
    day_of_week: FieldSet

    @property
    def expression(self) -> str:
        return str(self.parts)


# --- Recurrence rule ---


@dataclass(frozen=True, slots=True)
class RecurrenceRule:
    """A repeating pattern anchored at ``start_date``.

    Weekdays count from Sunday=0, month days from 1, months from 1. An empty
    constraint tuple means the constraint is not set. ``until`` is inclusive
    and, like ``count``, optional; when both are set whichever is reached
    first ends the sequence.
    """

    frequency: Frequency | str
    start_date: datetime
    interval: int = 1
    until: datetime | None = None
    count: int | None = None
    by_weekday: tuple[int, ...] = ()
    by_month_day: tuple[int, ...] = ()
    by_month: tuple[int, ...] = ()


# --- Names ---


WEEKDAY_NAMES: tuple[str, ...] = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)

MONTH_NAMES: tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
