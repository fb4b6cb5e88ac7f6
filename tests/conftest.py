from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any

import pytest

from cadence import RecurrenceRule

CONFORMANCE_PATH = Path(__file__).parent / "conformance.json"


def load_conformance() -> dict[str, Any]:
    with open(CONFORMANCE_PATH) as f:
        return json.load(f)


def parse_naive(s: str | None) -> datetime | None:
    """Parse '2025-01-13T09:00:00' into a naive datetime; None passes through."""
    if s is None:
        return None
    return datetime.fromisoformat(s)


def format_naive(dt: datetime | None) -> str | None:
    return None if dt is None else dt.isoformat()


def rule_from_json(data: dict[str, Any]) -> RecurrenceRule:
    return RecurrenceRule(
        frequency=data["frequency"],
        start_date=parse_naive(data["start"]),  # type: ignore[arg-type]
        interval=data.get("interval", 1),
        until=parse_naive(data.get("until")),
        count=data.get("count"),
        by_weekday=tuple(data.get("by_weekday", ())),
        by_month_day=tuple(data.get("by_month_day", ())),
        by_month=tuple(data.get("by_month", ())),
    )


@pytest.fixture
def fixed_clock() -> datetime:
    return datetime(2025, 1, 13, 8, 55)
