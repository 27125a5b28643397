"""Recurrence rules for calendar events.

A rule is either ``daily`` (every date from the anchor through the optional
end date) or ``weekly`` (only on the listed weekdays). Weekday numbers use
0=Sunday..6=Saturday everywhere: storage, request bodies and matching.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional

logger = logging.getLogger(__name__)

DAILY = "daily"
WEEKLY = "weekly"
FREQUENCIES = (DAILY, WEEKLY)


class InvalidRecurrence(ValueError):
    """Malformed frequency, weekday or end-date data."""


def weekday_of(day: date) -> int:
    """Weekday number with Sunday=0 (``date.weekday()`` has Monday=0)."""
    return day.isoweekday() % 7


def _coerce_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            raise InvalidRecurrence(f"Invalid end date: {value!r}")
    raise InvalidRecurrence(f"Invalid end date: {value!r}")


def _coerce_weekdays(values: Any) -> frozenset[int]:
    if values is None:
        return frozenset()
    if isinstance(values, (str, bytes)) or not hasattr(values, "__iter__"):
        raise InvalidRecurrence(f"Weekdays must be a list, got {values!r}")
    days = set()
    for v in values:
        # bool is an int subclass; True is not a weekday
        if isinstance(v, bool) or not isinstance(v, int):
            raise InvalidRecurrence(f"Invalid weekday: {v!r}")
        if not 0 <= v <= 6:
            raise InvalidRecurrence(f"Weekday out of range: {v}")
        days.add(v)
    return frozenset(days)


@dataclass(frozen=True)
class Recurrence:
    frequency: str
    days_of_week: frozenset[int] = field(default_factory=frozenset)
    end_date: Optional[date] = None

    @classmethod
    def from_raw(cls, raw: Any) -> "Recurrence":
        """Build a validated rule from a Recurrence, a mapping or any object
        exposing ``frequency`` / ``days_of_week`` / ``end_date``.

        Raises InvalidRecurrence for unknown frequencies, weekdays outside
        0-6 and unparseable end dates.
        """
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, dict):
            frequency = raw.get("frequency")
            days = raw.get("days_of_week")
            end = raw.get("end_date")
        else:
            frequency = getattr(raw, "frequency", None)
            days = getattr(raw, "days_of_week", None)
            end = getattr(raw, "end_date", None)

        if frequency not in FREQUENCIES:
            raise InvalidRecurrence(f"Unknown frequency: {frequency!r}")

        return cls(
            frequency=frequency,
            days_of_week=_coerce_weekdays(days),
            end_date=_coerce_date(end),
        )


def occurs_on(recurrence: Recurrence, candidate: date, anchor: date) -> bool:
    """Is the rule active on ``candidate`` for an event anchored at ``anchor``?

    Never true before the anchor or after the inclusive end date. An empty
    weekly weekday set matches nothing. Unrecognized frequencies never recur.
    """
    if candidate < anchor:
        return False
    if recurrence.end_date is not None and candidate > recurrence.end_date:
        return False

    if recurrence.frequency == DAILY:
        return True
    if recurrence.frequency == WEEKLY:
        return weekday_of(candidate) in recurrence.days_of_week

    logger.debug("Ignoring recurrence with unknown frequency %r", recurrence.frequency)
    return False
