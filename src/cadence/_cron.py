from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from datetime import datetime, timedelta
from itertools import islice

from ._calendar import cron_weekday, truncate_to_minute
from ._error import CadenceError
from ._model import CRON_FIELDS, CronParts, CronPattern, FieldBounds, FieldKind, FieldSet

logger = logging.getLogger(__name__)

# =============================================================================
# Search Limits
# =============================================================================
# MAX_CRON_ITERATIONS (525,600): one non-leap year of minutes. next/previous
# searches step one minute at a time and give up after this many candidates,
# which is the only termination guarantee for patterns that can never match
# (e.g. "0 0 31 2 *"). Giving up is reported exactly like "no match".
# =============================================================================

MAX_CRON_ITERATIONS = 525_600

_ONE_MINUTE = timedelta(minutes=1)

CRON_PRESETS: dict[str, str] = {
    "every_minute": "* * * * *",
    "every_hour": "0 * * * *",
    "every_day": "0 0 * * *",
    "every_day_at_9am": "0 9 * * *",
    "every_day_at_6pm": "0 18 * * *",
    "every_week": "0 0 * * 0",
    "every_month": "0 0 1 * *",
    "every_year": "0 0 1 1 *",
    "weekdays": "0 0 * * 1-5",
    "weekends": "0 0 * * 0,6",
    "every_5_minutes": "*/5 * * * *",
    "every_15_minutes": "*/15 * * * *",
    "every_30_minutes": "*/30 * * * *",
}

CronInput = str | CronPattern


# ============================================================================
# Parsing
# ============================================================================


def split_cron(expression: str) -> CronParts | None:
    """Split an expression into its five raw fields, or None for any other count."""
    fields = expression.split()
    if len(fields) != 5:
        return None
    return CronParts(*fields)


def parse_field(token: str, min_value: int, max_value: int) -> FieldSet | None:
    """Parse one cron field, returning None when it is malformed or out of bounds."""
    try:
        return _parse_field(token, FieldBounds("field", min_value, max_value))
    except CadenceError:
        return None


def parse_cron(expression: str) -> CronPattern | None:
    try:
        return compile_cron(expression)
    except CadenceError:
        return None


def compile_cron(expression: str) -> CronPattern:
    """Parse a 5-field cron expression, raising CadenceError on the first bad field."""
    parts = split_cron(expression)
    if parts is None:
        raise CadenceError.cron(
            f"expected 5 cron fields, got {len(expression.split())}", value=expression
        )
    tokens = (parts.minute, parts.hour, parts.day_of_month, parts.month, parts.day_of_week)
    minute, hour, dom, month, dow = (
        _parse_field(token, bounds) for token, bounds in zip(tokens, CRON_FIELDS, strict=True)
    )
    return CronPattern(parts, minute, hour, dom, month, dow)


def is_valid_cron(expression: str) -> bool:
    return parse_cron(expression) is not None


def _parse_field(token: str, bounds: FieldBounds) -> FieldSet:
    lo, hi = bounds.min_value, bounds.max_value

    if token == "*":
        return FieldSet(FieldKind.ALL, tuple(range(lo, hi + 1)))

    # Step values: */N, A/N or A-B/N
    if "/" in token:
        range_part, step_str = token.split("/", 1)
        step = _parse_int(step_str, bounds)
        if step == 0:
            raise CadenceError.cron(f"{bounds.name} step cannot be 0", bounds.name, token)
        if range_part == "*":
            start, end = lo, hi
        elif "-" in range_part:
            start, end = _parse_range(range_part, bounds)
        else:
            start = _parse_int(range_part, bounds)
            _validate_bounds(start, bounds)
            end = hi
        return FieldSet(FieldKind.STEP, tuple(range(start, end + 1, step)))

    # Range: A-B
    if "-" in token:
        start, end = _parse_range(token, bounds)
        return FieldSet(FieldKind.RANGE, tuple(range(start, end + 1)))

    # List: A,B,C (members are not bounds-checked)
    if "," in token:
        items = {_parse_int(item, bounds) for item in token.split(",")}
        return FieldSet(FieldKind.LIST, tuple(sorted(items)))

    value = _parse_int(token, bounds)
    _validate_bounds(value, bounds)
    return FieldSet(FieldKind.SPECIFIC, (value,))


def _parse_range(text: str, bounds: FieldBounds) -> tuple[int, int]:
    start_str, end_str = text.split("-", 1)
    start = _parse_int(start_str, bounds)
    end = _parse_int(end_str, bounds)
    if start > end:
        raise CadenceError.cron(
            f"{bounds.name} range start must be <= end: {start}-{end}", bounds.name, text
        )
    _validate_bounds(start, bounds)
    _validate_bounds(end, bounds)
    return start, end


def _parse_int(text: str, bounds: FieldBounds) -> int:
    if not (text.isascii() and text.isdigit()):
        raise CadenceError.cron(f"invalid {bounds.name} value: {text!r}", bounds.name, text)
    return int(text)


def _validate_bounds(value: int, bounds: FieldBounds) -> None:
    if value < bounds.min_value or value > bounds.max_value:
        raise CadenceError.cron(
            f"{bounds.name} must be {bounds.min_value}-{bounds.max_value}, got {value}",
            bounds.name,
            value,
        )


def _resolve(expression: CronInput) -> CronPattern | None:
    if isinstance(expression, CronPattern):
        return expression
    return parse_cron(expression)


# ============================================================================
# Matching
# ============================================================================


def matches_cron(instant: datetime, expression: CronInput) -> bool:
    pattern = _resolve(expression)
    if pattern is None:
        return False
    return _matcher(pattern)(instant)


def _matcher(pattern: CronPattern) -> Callable[[datetime], bool]:
    # Day of month and day of week are combined with AND, not cron's usual OR.
    minutes = frozenset(pattern.minute.values)
    hours = frozenset(pattern.hour.values)
    days = frozenset(pattern.day_of_month.values)
    months = frozenset(pattern.month.values)
    weekdays = frozenset(pattern.day_of_week.values)

    def matches(dt: datetime) -> bool:
        return (
            dt.minute in minutes
            and dt.hour in hours
            and dt.day in days
            and dt.month in months
            and cron_weekday(dt) in weekdays
        )

    return matches


# ============================================================================
# Searching
# ============================================================================


def next_cron(
    expression: CronInput,
    after: datetime,
    *,
    max_iterations: int = MAX_CRON_ITERATIONS,
) -> datetime | None:
    """First matching minute strictly after `after`, or None."""
    pattern = _resolve(expression)
    if pattern is None:
        return None
    start = truncate_to_minute(after) + _ONE_MINUTE
    return _search(pattern, start, _ONE_MINUTE, max_iterations)


def previous_cron(
    expression: CronInput,
    before: datetime,
    *,
    max_iterations: int = MAX_CRON_ITERATIONS,
) -> datetime | None:
    """Last matching minute before the minute containing `before`, or None."""
    pattern = _resolve(expression)
    if pattern is None:
        return None
    start = truncate_to_minute(before) - _ONE_MINUTE
    return _search(pattern, start, -_ONE_MINUTE, max_iterations)


def iter_cron(expression: CronInput, after: datetime) -> Iterator[datetime]:
    pattern = _resolve(expression)
    if pattern is None:
        return
    current: datetime | None = next_cron(pattern, after)
    while current is not None:
        yield current
        current = next_cron(pattern, current)


def next_cron_n(expression: CronInput, count: int, after: datetime) -> list[datetime]:
    return list(islice(iter_cron(expression, after), max(count, 0)))


def _search(
    pattern: CronPattern,
    candidate: datetime,
    step: timedelta,
    max_iterations: int,
) -> datetime | None:
    matches = _matcher(pattern)
    for _ in range(max_iterations):
        if matches(candidate):
            return candidate
        candidate += step
    logger.debug(
        "cron search for %r gave up after %d candidates", pattern.expression, max_iterations
    )
    return None
