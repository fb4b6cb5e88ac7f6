from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from datetime import datetime

from ._calendar import CalendarUnit, add_calendar_unit, cron_weekday
from ._cron import (
    CRON_PRESETS,
    MAX_CRON_ITERATIONS,
    compile_cron,
    is_valid_cron,
    iter_cron,
    matches_cron,
    next_cron,
    next_cron_n,
    parse_cron,
    parse_field,
    previous_cron,
    split_cron,
)
from ._display import describe_cron, describe_rule
from ._error import CadenceError, CadenceErrorKind
from ._model import (
    CronParts,
    CronPattern,
    FieldKind,
    FieldSet,
    Frequency,
    RecurrenceRule,
    StepStrategy,
)
from ._recurrence import (
    DEFAULT_ALL_LIMIT,
    DEFAULT_BETWEEN_LIMIT,
    MAX_OCCURRENCE_ITERATIONS,
    RANGE_ITERATION_FACTOR,
    all_occurrences,
    is_occurrence,
    is_valid_rule,
    iter_occurrences,
    matches_rule,
    next_candidate,
    next_occurrence,
    occurrences_between,
    select_step_strategy,
    validate_rule,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

Clock = Callable[[], datetime]


class Cron:
    _pattern: CronPattern
    _clock: Clock

    def __init__(self, pattern: CronPattern, clock: Clock = datetime.now) -> None:
        self._pattern = pattern
        self._clock = clock

    @classmethod
    def parse(cls, expression: str, clock: Clock = datetime.now) -> Cron:
        return cls(compile_cron(expression), clock)

    @classmethod
    def validate(cls, expression: str) -> bool:
        return is_valid_cron(expression)

    def matches(self, dt: datetime) -> bool:
        return matches_cron(dt, self._pattern)

    def next_from(self, now: datetime | None = None) -> datetime | None:
        return next_cron(self._pattern, self._now(now))

    def previous_from(self, now: datetime | None = None) -> datetime | None:
        return previous_cron(self._pattern, self._now(now))

    def next_n_from(self, n: int, now: datetime | None = None) -> list[datetime]:
        return next_cron_n(self._pattern, n, self._now(now))

    def occurrences(self, from_: datetime | None = None) -> Iterator[datetime]:
        """Returns a lazy iterator of matching minutes strictly after `from_`.

        The iterator ends only when a search exhausts MAX_CRON_ITERATIONS.
        """
        return iter_cron(self._pattern, self._now(from_))

    def _now(self, dt: datetime | None) -> datetime:
        return self._clock() if dt is None else dt

    def __str__(self) -> str:
        description = describe_cron(self._pattern.expression)
        return description if description is not None else self._pattern.expression

    def __repr__(self) -> str:
        return f"Cron({self._pattern.expression!r})"

    @property
    def expression(self) -> str:
        return self._pattern.expression

    @property
    def pattern(self) -> CronPattern:
        return self._pattern


class Recurrence:
    _rule: RecurrenceRule
    _clock: Clock

    def __init__(self, rule: RecurrenceRule, clock: Clock = datetime.now) -> None:
        validate_rule(rule)
        self._rule = rule
        self._clock = clock

    def next_occurrence(self, after: datetime | None = None) -> datetime | None:
        return next_occurrence(self._rule, self._clock() if after is None else after)

    def occurrences_between(
        self, start: datetime, end: datetime, limit: int = DEFAULT_BETWEEN_LIMIT
    ) -> list[datetime]:
        return occurrences_between(self._rule, start, end, limit)

    def is_occurrence(self, dt: datetime) -> bool:
        return is_occurrence(self._rule, dt)

    def all_occurrences(self, limit: int = DEFAULT_ALL_LIMIT) -> list[datetime]:
        return all_occurrences(self._rule, limit)

    def __iter__(self) -> Iterator[datetime]:
        """Iterates every occurrence from start_date, bounded only by `until` and `count`."""
        return iter_occurrences(self._rule)

    def __str__(self) -> str:
        return describe_rule(self._rule)

    def __repr__(self) -> str:
        return f"Recurrence({describe_rule(self._rule)!r})"

    @property
    def rule(self) -> RecurrenceRule:
        return self._rule


__all__ = [
    "Cron",
    "Recurrence",
    "CadenceError",
    "CadenceErrorKind",
    "CalendarUnit",
    "CronParts",
    "CronPattern",
    "FieldKind",
    "FieldSet",
    "Frequency",
    "RecurrenceRule",
    "StepStrategy",
    "CRON_PRESETS",
    "MAX_CRON_ITERATIONS",
    "MAX_OCCURRENCE_ITERATIONS",
    "RANGE_ITERATION_FACTOR",
    "DEFAULT_BETWEEN_LIMIT",
    "DEFAULT_ALL_LIMIT",
    "add_calendar_unit",
    "cron_weekday",
    "split_cron",
    "parse_field",
    "parse_cron",
    "compile_cron",
    "is_valid_cron",
    "matches_cron",
    "next_cron",
    "previous_cron",
    "next_cron_n",
    "iter_cron",
    "describe_cron",
    "matches_rule",
    "is_occurrence",
    "select_step_strategy",
    "next_candidate",
    "next_occurrence",
    "occurrences_between",
    "iter_occurrences",
    "all_occurrences",
    "validate_rule",
    "is_valid_rule",
    "describe_rule",
]
