from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import datetime, timedelta
from itertools import islice

from ._calendar import (
    CalendarUnit,
    add_calendar_unit,
    at_time_of,
    cron_weekday,
    days_between,
    months_between,
    years_between,
)
from ._error import CadenceError
from ._model import Frequency, RecurrenceRule, StepStrategy

logger = logging.getLogger(__name__)

# =============================================================================
# Iteration Safety Limits
# =============================================================================
# MAX_OCCURRENCE_ITERATIONS (1000): candidates tested by a single
# next_occurrence call before giving up.
#
# RANGE_ITERATION_FACTOR (10): occurrences_between tests at most
# limit * RANGE_ITERATION_FACTOR candidates.
#
# Rules with contradictory constraints (e.g. by_month=(2,), by_month_day=(31,))
# never match; these caps are what ends the search for them. Giving up is
# reported exactly like "no occurrence".
# =============================================================================

# =============================================================================
# Matching Granularity
# =============================================================================
# Rules are matched at day granularity: the clock time of the candidate is
# ignored. next_occurrence candidates carry the clock time of start_date;
# occurrences_between candidates carry the clock time of max(start_date, start).
#
#   daily:   day offset from start >= 0 and divisible by interval
#   weekly:  weekday in by_weekday (or start's weekday), and
#            (day offset // 7) divisible by interval
#   monthly: month offset >= 0, divisible by interval, day in by_month_day
#   yearly:  year offset >= 0, divisible by interval, month in by_month,
#            day in by_month_day
# =============================================================================

MAX_OCCURRENCE_ITERATIONS = 1000
RANGE_ITERATION_FACTOR = 10
DEFAULT_BETWEEN_LIMIT = 1000
DEFAULT_ALL_LIMIT = 100

_ONE_MILLISECOND = timedelta(milliseconds=1)

_JUMP_UNITS: dict[Frequency, CalendarUnit] = {
    Frequency.DAILY: CalendarUnit.DAY,
    Frequency.WEEKLY: CalendarUnit.WEEK,
    Frequency.MONTHLY: CalendarUnit.MONTH,
    Frequency.YEARLY: CalendarUnit.YEAR,
}


# --- Validation ---


def validate_rule(rule: RecurrenceRule) -> None:
    """Raise CadenceError describing the first problem found in `rule`."""
    try:
        Frequency(rule.frequency)
    except ValueError:
        raise CadenceError.rule(
            f"unknown frequency: {rule.frequency!r}", "frequency", rule.frequency
        ) from None
    if not isinstance(rule.start_date, datetime):
        raise CadenceError.rule("start_date must be a datetime", "start_date", rule.start_date)
    if not _is_int(rule.interval) or rule.interval < 1:
        raise CadenceError.rule(
            f"interval must be >= 1, got {rule.interval}", "interval", rule.interval
        )
    if rule.count is not None and (not _is_int(rule.count) or rule.count < 1):
        raise CadenceError.rule(f"count must be >= 1, got {rule.count}", "count", rule.count)
    if rule.until is not None:
        if not isinstance(rule.until, datetime):
            raise CadenceError.rule("until must be a datetime", "until", rule.until)
        if (rule.until.tzinfo is None) != (rule.start_date.tzinfo is None):
            raise CadenceError.rule(
                "until and start_date must both be naive or both be aware", "until", rule.until
            )
        if rule.until <= rule.start_date:
            raise CadenceError.rule("until must be after start_date", "until", rule.until)
    _validate_members(rule.by_weekday, "by_weekday", 0, 6)
    _validate_members(rule.by_month_day, "by_month_day", 1, 31)
    _validate_members(rule.by_month, "by_month", 1, 12)


def _validate_members(values: tuple[int, ...], name: str, min_val: int, max_val: int) -> None:
    if not isinstance(values, tuple | list):
        raise CadenceError.rule(f"{name} must be a tuple of ints", name, values)
    for value in values:
        if not _is_int(value) or value < min_val or value > max_val:
            raise CadenceError.rule(f"{name} must be {min_val}-{max_val}, got {value}", name, value)


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_valid_rule(rule: RecurrenceRule) -> bool:
    try:
        validate_rule(rule)
        return True
    except CadenceError:
        return False


# --- Matching ---


def matches_rule(instant: datetime, rule: RecurrenceRule) -> bool:
    start = rule.start_date
    interval = rule.interval

    match Frequency(rule.frequency):
        case Frequency.DAILY:
            offset = days_between(start, instant)
            return offset >= 0 and offset % interval == 0

        case Frequency.WEEKLY:
            weekday = cron_weekday(instant)
            if rule.by_weekday:
                if weekday not in rule.by_weekday:
                    return False
            elif weekday != cron_weekday(start):
                return False
            return (days_between(start, instant) // 7) % interval == 0

        case Frequency.MONTHLY:
            offset = months_between(start, instant)
            if offset < 0 or offset % interval != 0:
                return False
            return not rule.by_month_day or instant.day in rule.by_month_day

        case Frequency.YEARLY:
            offset = years_between(start, instant)
            if offset < 0 or offset % interval != 0:
                return False
            if rule.by_month and instant.month not in rule.by_month:
                return False
            return not rule.by_month_day or instant.day in rule.by_month_day


def is_occurrence(rule: RecurrenceRule, instant: datetime) -> bool:
    if instant < rule.start_date:
        return False
    if rule.until is not None and instant > rule.until:
        return False
    return matches_rule(instant, rule)


# --- Candidate stepping ---


def select_step_strategy(rule: RecurrenceRule) -> StepStrategy:
    """Day-scan whenever a constraint can pick days inside one interval, else jump."""
    match Frequency(rule.frequency):
        case Frequency.DAILY:
            constrained = True
        case Frequency.WEEKLY:
            constrained = bool(rule.by_weekday)
        case Frequency.MONTHLY:
            constrained = bool(rule.by_month_day)
        case Frequency.YEARLY:
            constrained = bool(rule.by_month or rule.by_month_day)
    return StepStrategy.DAY_SCAN if constrained else StepStrategy.JUMP


def next_candidate(candidate: datetime, rule: RecurrenceRule) -> datetime:
    if select_step_strategy(rule) is StepStrategy.DAY_SCAN:
        return add_calendar_unit(candidate, 1, CalendarUnit.DAY)
    unit = _JUMP_UNITS[Frequency(rule.frequency)]
    return add_calendar_unit(candidate, rule.interval, unit)


# --- Searching ---


def next_occurrence(
    rule: RecurrenceRule,
    after: datetime,
    *,
    max_iterations: int = MAX_OCCURRENCE_ITERATIONS,
) -> datetime | None:
    start = rule.start_date
    if after < start and matches_rule(start, rule):
        return start

    if rule.until is not None and after >= rule.until:
        return None

    # Search from the following day, at the clock time of start_date
    candidate = at_time_of(add_calendar_unit(after, 1, CalendarUnit.DAY), start)

    for _ in range(max_iterations):
        if rule.until is not None and candidate > rule.until:
            return None
        if matches_rule(candidate, rule):
            return candidate
        candidate = next_candidate(candidate, rule)

    logger.debug(
        "no %s occurrence after %s within %d candidates", rule.frequency, after, max_iterations
    )
    return None


def occurrences_between(
    rule: RecurrenceRule,
    start: datetime,
    end: datetime,
    limit: int = DEFAULT_BETWEEN_LIMIT,
) -> list[datetime]:
    """Occurrences in the inclusive range [start, end], at most `limit` of them."""
    occurrences: list[datetime] = []
    cursor = max(rule.start_date, start)

    for _ in range(limit * RANGE_ITERATION_FACTOR):
        if cursor > end or len(occurrences) >= limit:
            break
        if rule.until is not None and cursor > rule.until:
            break
        if cursor >= start and matches_rule(cursor, rule):
            occurrences.append(cursor)
        cursor = next_candidate(cursor, rule)
    else:
        if limit > 0:
            logger.debug(
                "occurrence range search stopped after %d candidates with %d results",
                limit * RANGE_ITERATION_FACTOR,
                len(occurrences),
            )

    return occurrences


def iter_occurrences(rule: RecurrenceRule) -> Iterator[datetime]:
    """Lazily yield occurrences after start_date, honouring `until` and `count`."""
    emitted = 0
    cursor = rule.start_date
    while rule.count is None or emitted < rule.count:
        if rule.until is not None and cursor > rule.until:
            return
        occurrence = next_occurrence(rule, cursor)
        if occurrence is None:
            return
        yield occurrence
        emitted += 1
        cursor = occurrence + _ONE_MILLISECOND


def all_occurrences(rule: RecurrenceRule, limit: int = DEFAULT_ALL_LIMIT) -> list[datetime]:
    return list(islice(iter_occurrences(rule), max(limit, 0)))
