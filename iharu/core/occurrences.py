"""Which events happen on a given date.

Events are any objects exposing ``start_date``, ``child_id``, ``recurrence``
(None, a core Recurrence, a mapping or an object with the rule fields),
``is_all_day`` and ``start_time`` ("HH:MM" or None). A bad rule on one event
never affects the others.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Iterable, Iterator, Optional

from iharu.core.recurrence import InvalidRecurrence, Recurrence, occurs_on
from iharu.core.visibility import ViewerScope, scope_allows

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Occurrence:
    event: Any
    date: date


def start_minutes(value: Optional[str]) -> Optional[int]:
    """Minutes since midnight for an "HH:MM" string, None if unusable."""
    if not value or not isinstance(value, str):
        return None
    hours, sep, minutes = value.partition(":")
    if not sep or not hours.isdigit() or not minutes[:2].isdigit():
        return None
    h, m = int(hours), int(minutes[:2])
    if h > 23 or m > 59:
        return None
    return h * 60 + m


def _recurrence_of(event: Any) -> Optional[Recurrence]:
    raw = getattr(event, "recurrence", None)
    if raw is None:
        return None
    try:
        return Recurrence.from_raw(raw)
    except InvalidRecurrence as e:
        logger.debug("Ignoring recurrence of event %s: %s", getattr(event, "id", "?"), e)
        return None


def matches_date(event: Any, day: date) -> bool:
    """Direct anchor-date match, or a recurrence match from the anchor on."""
    anchor = getattr(event, "start_date", None)
    if anchor is None:
        return False
    if anchor == day:
        return True

    recurrence = _recurrence_of(event)
    if recurrence is None:
        return False
    return occurs_on(recurrence, day, anchor)


def _display_key(event: Any) -> tuple[int, int]:
    if getattr(event, "is_all_day", False):
        return (0, 0)
    minutes = start_minutes(getattr(event, "start_time", None))
    if minutes is None:
        return (2, 0)
    return (1, minutes)


def occurrences_on(
    events: Iterable[Any],
    day: Optional[date],
    scope: ViewerScope,
) -> Iterator[Occurrence]:
    """Occurrences active on ``day`` that ``scope`` allows, in display order.

    All-day events first, then timed events by start time, then events with no
    usable start time. Ties keep input order.
    """
    if day is None:
        return
    matched = [
        e for e in events
        if scope_allows(scope, getattr(e, "child_id", None)) and matches_date(e, day)
    ]
    matched.sort(key=_display_key)
    for event in matched:
        yield Occurrence(event=event, date=day)


def occurrences_between(
    events: Iterable[Any],
    start: date,
    end: date,
    scope: ViewerScope,
) -> Iterator[Occurrence]:
    """Single-date queries for every date in [start, end], concatenated in date
    order. A recurring event appears once per matching date."""
    events = list(events)
    day = start
    while day <= end:
        yield from occurrences_on(events, day, scope)
        day += timedelta(days=1)


def upcoming(
    events: Iterable[Any],
    today: date,
    days: int,
    scope: ViewerScope,
) -> Iterator[Occurrence]:
    """The next ``days`` dates after today."""
    if days < 1:
        return iter(())
    return occurrences_between(
        events, today + timedelta(days=1), today + timedelta(days=days), scope
    )
