from __future__ import annotations

import re

from ._cron import split_cron
from ._model import MONTH_NAMES, WEEKDAY_NAMES, CronParts, Frequency, RecurrenceRule

_CANONICAL_CRON: dict[str, str] = {
    "* * * * *": "Every minute",
    "0 * * * *": "Every hour",
    "0 0 * * *": "Every day at midnight",
    "0 0 * * 0": "Every Sunday at midnight",
    "0 0 1 * *": "First day of every month at midnight",
}

_LEADING_INT = re.compile(r"[+-]?[0-9]+")

_UNITS: dict[Frequency, tuple[str, str]] = {
    Frequency.DAILY: ("day", "days"),
    Frequency.WEEKLY: ("week", "weeks"),
    Frequency.MONTHLY: ("month", "months"),
    Frequency.YEARLY: ("year", "years"),
}


# --- Cron ---


def describe_cron(expression: str) -> str | None:
    parts = split_cron(expression)
    if parts is None:
        return None

    canonical = _CANONICAL_CRON.get(expression)
    if canonical is not None:
        return canonical

    fragments = [
        f
        for f in (
            _describe_time(parts),
            _describe_day_of_month(parts.day_of_month),
            _describe_month(parts.month),
            _describe_day_of_week(parts.day_of_week),
        )
        if f
    ]
    return " ".join(fragments) or expression


def _describe_time(parts: CronParts) -> str | None:
    minute, hour = parts.minute, parts.hour
    if minute == "0" and hour != "*":
        if "/" in hour:
            return f"Every {hour.split('/')[1]} hours"
        if "-" in hour:
            return f"Every hour from {hour} at minute 0"
        return f"At {hour}:00"
    if minute != "*" and hour == "*":
        return f"At minute {minute} of every hour"
    if "/" in minute:
        return f"Every {minute.split('/')[1]} minutes"
    return None


def _describe_day_of_month(field: str) -> str | None:
    if field == "*":
        return None
    return f"on day {field} of the month"


def _describe_month(field: str) -> str | None:
    if field == "*":
        return None
    n = _leading_int(field)
    if n is not None and 1 <= n <= 12:
        return f"in {MONTH_NAMES[n - 1][:3]}"
    return f"in month {field}"


def _describe_day_of_week(field: str) -> str | None:
    if field == "*":
        return None
    n = _leading_int(field)
    if n is not None and 0 <= n <= 6:
        return f"on {WEEKDAY_NAMES[n][:3]}"
    return f"on day of week {field}"


def _leading_int(field: str) -> int | None:
    """The integer a field starts with, so "1-5" reads as 1 and "*/2" as None."""
    m = _LEADING_INT.match(field)
    return int(m.group()) if m else None


# --- Recurrence ---


def describe_rule(rule: RecurrenceRule) -> str:
    frequency = Frequency(rule.frequency)
    interval = rule.interval
    singular, plural = _UNITS[frequency]

    out = "Every" if interval == 1 else f"Every {interval}"
    out += f" {singular}" if interval == 1 else f" {plural}"

    match frequency:
        case Frequency.WEEKLY:
            if rule.by_weekday:
                out += " on " + ", ".join(WEEKDAY_NAMES[d] for d in rule.by_weekday)
        case Frequency.MONTHLY:
            if rule.by_month_day:
                out += f" on day {_join_numbers(rule.by_month_day)}"
        case Frequency.YEARLY:
            if rule.by_month:
                out += " in " + ", ".join(MONTH_NAMES[m - 1] for m in rule.by_month)
            if rule.by_month_day:
                out += f" on day {_join_numbers(rule.by_month_day)}"

    if rule.count:
        out += f" ({rule.count} times)"
    elif rule.until is not None:
        out += f" until {rule.until.date().isoformat()}"

    return out


def _join_numbers(values: tuple[int, ...]) -> str:
    return ", ".join(str(v) for v in values)
