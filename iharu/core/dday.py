"""D-day labels and urgency for due dates."""

from datetime import date, datetime
from zoneinfo import ZoneInfo

URGENT_WITHIN_DAYS = 2


def local_today(tz_name: str) -> date:
    """Today's civil date in the given IANA timezone."""
    return datetime.now(ZoneInfo(tz_name)).date()


def days_until(due: date, today: date) -> int:
    return (due - today).days


def dday_label(due: date, today: date) -> str:
    """'D-Day' when due today, 'D-3' three days ahead, 'D+2' two days late."""
    diff = days_until(due, today)
    if diff == 0:
        return "D-Day"
    if diff > 0:
        return f"D-{diff}"
    return f"D+{-diff}"


def is_urgent(due: date, today: date) -> bool:
    """Due within two days, due today, or already overdue."""
    return days_until(due, today) <= URGENT_WITHIN_DAYS


def is_overdue(due: date, today: date) -> bool:
    return due < today
